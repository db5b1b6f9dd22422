"""Exception hierarchy for Linguacare."""

# User-facing messages surfaced through component state
MICROPHONE_ERROR_MESSAGE = "Could not start recording. Please check microphone permissions."
RECORDING_TIMEOUT_TEMPLATE = (
    "Recording timed out. Please keep your recording under {limit:g} seconds and try again."
)
INVALID_RESPONSE_MESSAGE = "The AI returned an invalid response format."


class LinguacareError(Exception):
    """Base exception for Linguacare errors."""
    pass


class DeviceAccessError(LinguacareError):
    """Microphone permission was denied or the input device is unavailable."""
    pass


class RecordingTimeoutError(LinguacareError):
    """A recording ran past its deadline and its audio was discarded."""
    pass


class VoiceLoadTimeoutError(LinguacareError):
    """The speech engine never reported any voices within the polling window."""
    pass


class SpeechEngineError(LinguacareError):
    """The speech engine reported a failure while speaking an utterance."""
    pass


class FeedbackFormatError(LinguacareError):
    """The feedback service returned data that does not match the expected schema."""
    pass


class NoRecordingError(LinguacareError):
    """An operation needed a recorded artifact but none is available."""
    pass


def recording_timeout_message(limit_seconds: float) -> str:
    """User-facing timeout message for a recording limit, e.g. 15 -> "... under 15 seconds ..."."""
    return RECORDING_TIMEOUT_TEMPLATE.format(limit=limit_seconds)


RECORDING_TIMEOUT_MESSAGE = recording_timeout_message(15)
