"""Image decoding, available only when Pillow is installed.

`HAS_IMAGE_CODEC` is resolved once at import. Without Pillow this module
exports no decoder, and `DataResponse.image` / `HTTPRequest.fetch_image` are
not defined at all. Install the `image` extra to enable them.
"""

from __future__ import annotations

import importlib.util

HAS_IMAGE_CODEC: bool = importlib.util.find_spec("PIL") is not None

if HAS_IMAGE_CODEC:
    import io

    from PIL import Image

    from networker.errors import InvalidImageDataError
    from networker.result import Failure, Result, Success

    def decode_image(data: bytes) -> "Result[Image.Image, Exception]":
        """Decode `data` into a fully loaded Pillow image.

        Pillow signals bad input through many exception types (and
        truncated files only on `load`), so every decoder failure is
        reported as InvalidImageDataError.

        Security notes:
        - Pillow's decompression bomb guard stays enabled; oversized images
          fail like any other invalid data.
        """

        if not data:
            return Failure(InvalidImageDataError())
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except Exception as e:
            err = InvalidImageDataError()
            err.__cause__ = e
            return Failure(err)
        return Success(image)
