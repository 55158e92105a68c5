"""
Image detection for StickerGuard.

- **similarity.py**: Pixel-difference similarity between two canonical rasters.
- **sticker_classifier.py**: URL heuristics for sticker-like images.
- **detection_pipeline.py**: Cached reference raster and the ``detect`` operation.
"""
