"""
Constants and configuration values for Retouch.

This module centralizes all constant values, magic numbers, and
tuning parameters used by the image-processing core.
"""

# Adjustment sliders: name -> (minimum, maximum, default)
ADJUSTMENT_TABLE = {
    "exposure": (-1.0, 1.0, 0.0),
    "contrast": (0.5, 1.5, 1.0),
    "highlights": (0.0, 1.0, 1.0),
    "shadows": (-1.0, 1.0, 0.0),
    "saturation": (0.0, 2.0, 1.0),
    "vibrance": (-1.0, 1.0, 0.0),
    "temperature": (-1.0, 1.0, 0.0),
    "tint": (-1.0, 1.0, 0.0),
    "sharpen": (0.0, 10.0, 0.0),
    "vignette": (0.0, 2.0, 0.0),
}

# White balance mapping
NEUTRAL_KELVIN = 6500.0
KELVIN_PER_TEMPERATURE_UNIT = 1500.0
TINT_OFFSET_PER_UNIT = 150.0
TINT_GREEN_GAIN_PER_OFFSET = 1.0 / 1500.0

# Highlight/shadow tone split
HIGHLIGHT_PIVOT = 0.5
SHADOW_PIVOT = 0.5
HIGHLIGHT_SHADOW_STRENGTH = 0.25

# Sharpen / vignette
SHARPEN_SIGMA = 1.0
SHARPEN_STRENGTH = 0.1
SURFACE_EDGE_TOLERANCE = 0.08
VIGNETTE_RADIUS_PER_INTENSITY = 15.0
VIGNETTE_DARKEN_PER_INTENSITY = 0.5

# Stylistic filters
BLUR_RADIUS_PER_INTENSITY = 10.0
COOL_CONTRAST_BASE = 1.1
COOL_CONTRAST_PER_INTENSITY = 0.5
THUMBNAIL_SIZE = (100, 100)

# Retouch
SKIN_SMOOTH_RADIUS_PER_AMOUNT = 10.0
SKIN_SMOOTH_INTENSITY_PER_AMOUNT = 1.5
SKIN_PROTECT_FEATHER = 0.1
EYE_FEATHER = 0.05
EYE_EXPOSURE_PER_AMOUNT = 0.7
EYE_SATURATION_PER_AMOUNT = 0.3
EYE_UNSHARP_RADIUS = 2.5
TEETH_FEATHER = 0.05
TEETH_EXPOSURE_PER_AMOUNT = 0.5
TEETH_DESATURATION_PER_AMOUNT = 0.8

# Transforms
MAX_STRAIGHTEN_DEGREES = 45.0
COMMON_ASPECT_RATIOS = {
    "1:1 Square": 1.0,
    "16:9": 16.0 / 9.0,
    "4:5": 4.0 / 5.0,
}

# Overlays
DEFAULT_OVERLAY_TEXT = "Hello"
DEFAULT_FONT_NAME = "Helvetica-Bold"
DEFAULT_FONT_SIZE = 50.0
DEFAULT_OVERLAY_COLOR = (255, 255, 255, 255)
FONT_FALLBACKS = {
    "Helvetica-Bold": ("Arial Bold.ttf", "arialbd.ttf", "DejaVuSans-Bold.ttf", "LiberationSans-Bold.ttf"),
    "Helvetica": ("Arial.ttf", "arial.ttf", "DejaVuSans.ttf", "LiberationSans-Regular.ttf"),
    "Georgia": ("Georgia.ttf", "georgia.ttf", "DejaVuSerif.ttf", "LiberationSerif-Regular.ttf"),
    "Courier": ("Courier New.ttf", "cour.ttf", "DejaVuSansMono.ttf", "LiberationMono-Regular.ttf"),
}

# AI service
AI_JPEG_QUALITY = 0.8
AI_IMAGE_MIME_TYPES = ("image/jpeg", "image/png")
AI_ENV_PREFIX = "RETOUCH_AI_"
AI_DEFAULT_MODEL = "gemini-1.5-flash"
AI_DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
AI_DEFAULT_TIMEOUT = 60.0
PROMPT_REMOVE_OBJECT = "Remove the object highlighted in the mask and fill the area realistically."
PROMPT_AUTO_ENHANCE = (
    "Auto-enhance this photo. Adjust brightness, contrast, and color balance to make it look "
    "professional, vibrant, and clear. Return only the enhanced image."
)
PROMPT_REMOVE_BACKGROUND = (
    "Remove the background from this image. Make the background transparent. "
    "Return a PNG with alpha transparency. Return only the processed image."
)
PROMPT_COLORIZE = (
    "Colorize this black and white photo. Make the colors look realistic and natural. "
    "Return only the colorized image."
)

# Object removal mask
DEFAULT_BRUSH_SIZE = 40.0
MIN_BRUSH_SIZE = 10.0
MAX_BRUSH_SIZE = 100.0

# Export
DEFAULT_EXPORT_QUALITY = 0.9
MIN_EXPORT_QUALITY = 0.1
MAX_EXPORT_QUALITY = 1.0
OUTPUT_FILE_PREFIX = "edited_"

# Operator names
OPERATOR_ADJUSTMENTS = "Adjustments"
OPERATOR_FILTER = "Filter"
OPERATOR_RETOUCH = "Retouch"
OPERATOR_TRANSFORM = "Transform"
OPERATOR_CENTER_CROP = "Center Crop"
OPERATOR_OVERLAY_BAKE = "Overlay Bake"
