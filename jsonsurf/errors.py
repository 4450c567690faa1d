class JsonSurfError(Exception):
    """jsonsurf 所有异常的基类"""


class DeserializeError(JsonSurfError):
    """抽取或解码阶段的失败，stage 标明是哪个阶段"""
    stage = "unknown"

    def __str__(self):
        message = super().__str__()
        if self.stage == "extraction":
            return f"JSON extraction error: {message}"
        if self.stage == "decode":
            return f"JSON deserialization error: {message}"
        return message


class ExtractionError(DeserializeError):
    stage = "extraction"


class DecodeError(DeserializeError):
    stage = "decode"
