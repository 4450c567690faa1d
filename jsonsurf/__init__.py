from .accumulator import StreamingObjectAccumulator
from .errors import DecodeError, DeserializeError, ExtractionError, JsonSurfError
from .extractor import copy_json, extract_json_to_string
from .json_stream_extractor import JSONStreamExtractor
from .marker import Marker, NestingStack
from .settings import ExtractorSettings, configure_extractor_settings, get_extractor_settings
from .typed_decode import from_mixed_text, from_mixed_text_with_parser, json_decoder, model_decoder, resolve_decoder

__all__ = [
    "DecodeError",
    "DeserializeError",
    "ExtractionError",
    "ExtractorSettings",
    "JSONStreamExtractor",
    "JsonSurfError",
    "Marker",
    "NestingStack",
    "StreamingObjectAccumulator",
    "configure_extractor_settings",
    "copy_json",
    "extract_json_to_string",
    "from_mixed_text",
    "from_mixed_text_with_parser",
    "get_extractor_settings",
    "json_decoder",
    "model_decoder",
    "resolve_decoder",
]
