"""
RT_Libs - Retouch Library Modules

This package contains the image-processing core of Retouch,
organized into specialized sub-packages:

- ImageEditingLib: Raster image model, adjustments, filters, transforms, export
- RetouchLib: Face landmarks, region masks and face-aware retouching
- OverlayLib: Text overlay items and the overlay compositor
- ServicesLib: AI editing service client and object-removal masks
- PipelineLib: Operator registry and edit chains
"""

__version__ = "0.1.0"
