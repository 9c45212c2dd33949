"""Encoder profile and audio mode enums."""

from enum import Enum


class EncoderProfile(str, Enum):
    """Video encoder profiles."""

    CPU_X265 = "cpu-x265"  # libx265, 10-bit
    HW_HEVC = "hw-hevc"  # Apple VideoToolbox
    AV1 = "av1"  # SVT-AV1


class AudioMode(str, Enum):
    """How selected audio streams are written."""

    COPY = "copy"
    TRANSCODE = "transcode"

    @classmethod
    def _missing_(cls, value):
        # "aac" was the historical name for transcode mode
        if isinstance(value, str):
            value = value.lower()
            if value == "aac":
                return cls.TRANSCODE
            for member in cls:
                if member.value == value:
                    return member
        return None
