"""File management for recorded practice attempts."""

import logging
import random
import string
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

from ..models.audio import RecordingArtifact

logger = logging.getLogger(__name__)

# Content type prefix -> file extension
EXTENSIONS = {
    "audio/wav": ".wav",
    "audio/L16": ".pcm",
}


class RecordingStore:
    """Stores recording artifacts so they can be replayed by file URL."""

    def __init__(self, data_dir: str = "./data"):
        """Initialize the store with a data directory.

        Args:
            data_dir: Base directory; artifacts go to <data_dir>/recordings
        """
        self.data_dir = Path(data_dir)
        self.recordings_dir = self.data_dir / "recordings"
        self.recordings_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"RecordingStore initialized with data_dir: {self.data_dir}")

    def save_artifact(self, artifact: RecordingArtifact) -> Path:
        """Write an artifact to a uniquely named file.

        Args:
            artifact: Completed recording

        Returns:
            Absolute path of the written file
        """
        # Include random suffix to ensure uniqueness
        timestamp = artifact.created_at.strftime("%Y%m%d_%H%M%S")
        random_suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=4))
        extension = EXTENSIONS.get(artifact.content_type.split(';')[0], ".bin")
        file_path = (self.recordings_dir / f"{timestamp}_{random_suffix}{extension}").absolute()

        try:
            with open(file_path, 'wb') as f:
                f.write(artifact.data)
        except OSError as e:
            logger.error(f"Error saving recording: {e}")
            raise

        logger.info(f"Recording saved: {file_path} ({artifact.size_bytes} bytes)")
        return file_path

    def list_recordings(self) -> List[Path]:
        """List stored recordings, oldest first."""
        return sorted(p for p in self.recordings_dir.iterdir() if p.is_file())

    def get_storage_stats(self) -> Dict[str, Any]:
        """Get storage usage statistics."""
        recordings = self.list_recordings()
        total_size = sum(p.stat().st_size for p in recordings)
        return {
            "total_size_bytes": total_size,
            "total_size_mb": round(total_size / (1024 * 1024), 2),
            "recording_count": len(recordings),
            "data_directory": str(self.data_dir),
            "generated_at": datetime.now().isoformat(),
        }
