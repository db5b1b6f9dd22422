"""Main application entry point for Linguacare."""

import sys
import time
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.live import Live
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, TextColumn
from rich.table import Table

from linguacare.audio.audio_pub import RecordingPublisher
from linguacare.audio.capture import AudioCaptureSession
from linguacare.models.speech import Language
from linguacare.speech.catalog import VoiceCatalog
from linguacare.speech.manager import SpeechOutputManager
from linguacare.speech.publisher import SpeechPublisher
from linguacare.storage.preferences import PreferenceStore
from linguacare.storage.recording_store import RecordingStore

from . import __version__
from .config import LinguacareConfig

logger = logging.getLogger(__name__)


class Server:

    def __init__(self, config_path: str, log_level: str = "INFO"):
        # Load configuration
        self.config = LinguacareConfig(config_path)
        self.console = Console()
        # Command line level overrides config
        self.log_file = setup_logging(self.config, log_level or self.config.get('logging.level', 'INFO'))
        self.capture = None
        self.speech = None

    def init(self):
        """Create the capture session and speech manager from configuration."""
        # Platform backends are imported here so the package imports without audio drivers
        from linguacare.audio.pyaudio_input import PyAudioInput
        from linguacare.speech.pyttsx3_engine import Pyttsx3SpeechEngine

        logger.info("Initializing services...")

        sample_rate = self.config.get('audio.sample_rate', 16000)
        chunk_size = self.config.get('audio.chunk_size', 1024)
        channels = self.config.get('audio.channels', 1)
        logger.info(f"Audio settings: {sample_rate}Hz, {chunk_size} samples/chunk, {channels} channels")

        self.recording_publisher = RecordingPublisher("recording_events")
        self.capture = AudioCaptureSession(
            audio_input=PyAudioInput(sample_rate=sample_rate, chunk_size=chunk_size, channels=channels),
            callback=self.recording_publisher.publish_recording_event,
            time_limit_seconds=self.config.get('recording.time_limit_seconds', 15.0),
            meter_interval_seconds=self.config.get('recording.meter_interval_seconds', 1.0 / 60),
            volume_gain=self.config.get('recording.volume_gain', 5.0),
            mime_type=self.config.get('audio.mime_type', 'audio/wav'),
            store=RecordingStore(self.config.get_data_directory()),
        )

        engine = Pyttsx3SpeechEngine(rate=self.config.get('speech.rate'))
        catalog = VoiceCatalog(
            engine,
            poll_interval_seconds=self.config.get('speech.voice_poll_interval_seconds', 0.25),
            max_poll_attempts=self.config.get('speech.voice_poll_attempts', 20),
        )
        self.speech_publisher = SpeechPublisher("speech_events")
        self.speech = SpeechOutputManager(
            engine,
            catalog=catalog,
            preferences=PreferenceStore(self.config.get_preferences_file()),
            callback=self.speech_publisher.publish_speech_event,
            failsafe_seconds=self.config.get('speech.failsafe_seconds', 8.0),
            keep_alive_seconds=self.config.get('speech.keep_alive_seconds', 14.0),
            preferred_provider=self.config.get('speech.preferred_provider', 'google'),
        )
        self.speech.start()

    def show_voices(self) -> None:
        categories = self.speech.refresh_voices()
        table = Table(title="Available voices")
        table.add_column("Language")
        table.add_column("Voice")
        table.add_column("Tag")
        table.add_column("Preferred")
        for language in Language:
            preferred = self.speech.preferred_voice(language)
            voices = categories.for_language(language)
            if not voices:
                table.add_row(language.value, "[dim]none installed[/dim]", "", "")
            for voice in voices:
                table.add_row(language.value, voice.name, voice.lang,
                              "*" if voice.name == preferred else "")
        self.console.print(table)

    def say(self, text: str, language: str) -> None:
        self.speech.speak(text, language)
        while self.speech.is_speaking:
            time.sleep(0.1)

    def record(self, seconds: float) -> None:
        progress = Progress(
            TextColumn("[bold]Mic level"),
            BarColumn(bar_width=40),
            TextColumn("{task.fields[elapsed]:.1f}s"),
        )
        level = progress.add_task("level", total=1.0, elapsed=0.0)

        self.capture.start_recording()
        started = time.time()
        with Live(progress, console=self.console, refresh_per_second=20):
            while self.capture.is_recording and time.time() - started < seconds:
                progress.update(level, completed=self.capture.volume, elapsed=time.time() - started)
                time.sleep(0.05)
        self.capture.stop_recording()

        if self.capture.recorder_error:
            self.console.print(f"[red]{self.capture.recorder_error}[/red]")
        elif self.capture.audio_blob is not None:
            blob = self.capture.audio_blob
            self.console.print(f"Saved {blob.duration_seconds:.1f}s recording: {self.capture.audio_url}")
        else:
            self.console.print("No audio was captured.")

    def cleanup(self):
        if self.capture is not None:
            self.capture.close()
        if self.speech is not None:
            self.speech.shutdown()


def setup_logging(config, level: str = "INFO", console: Optional[Console] = None) -> Path:
    """Route log records to the log file and, optionally, the terminal.

    The file receives everything from DEBUG up. The terminal handler is a
    RichHandler at ``logging.console_level`` (WARNING by default) writing to
    stderr, so it does not tear the live volume meter drawn on stdout.

    Args:
        config: Loaded LinguacareConfig
        level: Root logger level; the command line value wins over ``logging.level``
        console: Rich console to log to; a stderr console is created when omitted

    Returns:
        Path of the log file
    """
    log_file = Path(config.get('logging.file_path')
                    or Path(config.get_data_directory()) / "logs" / "linguacare.log")
    log_file.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s'
    ))
    handlers: List[logging.Handler] = [file_handler]

    if config.get('logging.console_output', True):
        console_handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            markup=False,
        )
        console_handler.setLevel(str(config.get('logging.console_level', 'WARNING')).upper())
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level.upper())
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info(f"Linguacare {__version__} logging at {level.upper()} to {log_file}")
    return log_file


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Linguacare - speech practice from the terminal",
    )

    parser.add_argument(
        "--config",
        type=str,
        required=True,
        help="Path to configuration YAML file (e.g. linguacare.yaml)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: logging.level from config, else INFO)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Linguacare v{__version__}"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("voices", help="List synthesis voices by language")

    say = commands.add_parser("say", help="Speak a phrase")
    say.add_argument("text", type=str)
    say.add_argument(
        "--language",
        type=str,
        default=Language.ENGLISH.value,
        choices=[language.value for language in Language],
    )

    record = commands.add_parser("record", help="Record one attempt with a live level meter")
    record.add_argument(
        "--seconds",
        type=float,
        default=5.0,
        help="Stop after this many seconds (the recording limit still applies)"
    )

    return parser


def main() -> None:
    """Main entry point for the Linguacare CLI."""
    args = build_parser().parse_args()

    server = Server(args.config, args.log_level)
    try:
        server.init()
        if args.command == "voices":
            server.show_voices()
        elif args.command == "say":
            server.say(args.text, args.language)
        elif args.command == "record":
            server.record(args.seconds)
    except KeyboardInterrupt:
        print("\nGoodbye!")
    except Exception as e:
        print(f"Error: {e}")
        logging.error(f"Application error: {e}")
        sys.exit(1)
    finally:
        server.cleanup()


if __name__ == "__main__":
    main()
