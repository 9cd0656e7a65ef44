"""Pick the PayloadBuilder for the capture platform once, at wiring time."""
from audioscribe.payload.builder import PayloadBuilder
from audioscribe.payload.native import NativePayloadBuilder
from audioscribe.payload.web import WebPayloadBuilder


def payload_builder_for(platform: str) -> PayloadBuilder:
    match platform.lower():
        case "web":
            return WebPayloadBuilder()
        case "native" | "ios" | "android":
            return NativePayloadBuilder()
        case other:
            raise ValueError(f"Unknown audio platform: {other}")
