"""
Locate the generated image in a gateway response.

The response shape has drifted between gateway and SDK revisions, so the
image may sit in any of several places. Each place is covered by one
strategy: a pure function from the raw response to decoded bytes (or None).
``extract_generated_image`` tries them in ``STRATEGIES`` order and returns
the first hit.

Known shapes, in search order:

1. ``files[]`` attachments tagged with an ``image/`` media type
2. ``response.images[].base64``
3. ``providerMetadata.google.files[]``
4. ``choices[].message.images[].image_url.url`` (OpenAI-compatible gateway)
5. ``candidates[].content.parts[].inlineData`` (native Gemini)
"""

import base64
import binascii
import json
import logging
from collections.abc import Mapping
from typing import Any, Callable, Iterable, Optional, Tuple

from relight.errors import NoImageGeneratedError

logger = logging.getLogger(__name__)

RAW_RESPONSE_PREVIEW = 1000

Strategy = Callable[[Any], Optional[bytes]]


def _field(obj: Any, *names: str) -> Any:
    """First present, non-empty field among ``names``, for dicts and SDK objects alike."""
    if obj is None:
        return None
    for name in names:
        if isinstance(obj, Mapping):
            value = obj.get(name)
        else:
            value = getattr(obj, name, None)
        if value is not None and value != "":
            return value
    return None


def _items(value: Any) -> Iterable[Any]:
    if isinstance(value, (list, tuple)):
        return value
    return ()


def _is_image(entry: Any) -> bool:
    media_type = _field(entry, "mediaType", "mimeType", "mime_type", "media_type")
    return isinstance(media_type, str) and media_type.startswith("image/")


def decode_payload(data: Any) -> Optional[bytes]:
    """
    Decode an embedded image payload.

    Accepts base64 text (bare or as a data URL), raw bytes, a list of ints, or
    a serialised byte array ``{"0": 137, "1": 80, ...}``. Returns None when
    the payload is empty or not decodable.
    """
    if isinstance(data, (bytes, bytearray)):
        return bytes(data) or None

    if isinstance(data, str):
        encoded = data.rsplit(",", 1)[-1] if "," in data else data
        # MIME-style base64 may be wrapped across lines
        try:
            decoded = base64.b64decode("".join(encoded.split()), validate=True)
        except (binascii.Error, ValueError):
            return None
        return decoded or None

    try:
        if isinstance(data, (list, tuple)):
            return bytes(data) or None
        if isinstance(data, Mapping) and data:
            ordered = sorted(data.items(), key=lambda kv: int(kv[0]))
            return bytes(v for _, v in ordered) or None
    except (TypeError, ValueError):
        return None

    return None


def _first_decoded(entries: Iterable[Any], *payload_fields: str, require_image_type: bool = True) -> Optional[bytes]:
    for entry in entries:
        if require_image_type and not _is_image(entry):
            continue
        decoded = decode_payload(_field(entry, *payload_fields))
        if decoded:
            return decoded
    return None


def from_files(response: Any) -> Optional[bytes]:
    return _first_decoded(_items(_field(response, "files")), "data", "base64", "uint8Array")


def from_response_images(response: Any) -> Optional[bytes]:
    images = _field(_field(response, "response"), "images")
    return _first_decoded(_items(images), "base64", require_image_type=False)


def from_provider_metadata(response: Any) -> Optional[bytes]:
    google = _field(_field(response, "providerMetadata", "provider_metadata"), "google")
    return _first_decoded(_items(_field(google, "files")), "data", "base64")


def from_message_images(response: Any) -> Optional[bytes]:
    for choice in _items(_field(response, "choices")):
        images = _field(_field(choice, "message"), "images")
        for image in _items(images):
            url = _field(_field(image, "image_url", "imageUrl"), "url")
            if isinstance(url, str) and url.startswith("data:image/"):
                decoded = decode_payload(url)
                if decoded:
                    return decoded
    return None


def from_inline_parts(response: Any) -> Optional[bytes]:
    for candidate in _items(_field(response, "candidates")):
        parts = _field(_field(candidate, "content"), "parts")
        inline = [_field(part, "inlineData", "inline_data") for part in _items(parts)]
        decoded = _first_decoded([i for i in inline if i is not None], "data")
        if decoded:
            return decoded
    return None


STRATEGIES: Tuple[Strategy, ...] = (
    from_files,
    from_response_images,
    from_provider_metadata,
    from_message_images,
    from_inline_parts,
)


def describe_response(response: Any) -> str:
    try:
        dumped = json.dumps(response, indent=2, default=str)
    except (TypeError, ValueError):
        dumped = repr(response)
    return dumped[:RAW_RESPONSE_PREVIEW]


def extract_generated_image(response: Any, strategies: Iterable[Strategy] = STRATEGIES) -> bytes:
    for strategy in strategies:
        image = strategy(response)
        if image:
            logger.info("Found generated image via %s", strategy.__name__)
            return image

    preview = describe_response(response)
    logger.error("No image generated. Response: %s", preview)
    raise NoImageGeneratedError(preview)
