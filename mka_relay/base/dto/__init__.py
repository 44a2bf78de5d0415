"""DTO validation package for relay proxy requests."""

from .relay import (
    RelayMessageDTO,
    RelayRequestDTO,
    TextToSpeechDTO,
    TranscribeDTO,
    first_error_message,
)

__all__ = [
    "RelayMessageDTO",
    "RelayRequestDTO",
    "TextToSpeechDTO",
    "TranscribeDTO",
    "first_error_message",
]
