"""Google Veo image-to-video client via Vertex AI."""

import asyncio
import base64
import logging
import mimetypes
import time
import uuid
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from google.cloud import storage

from ..config import config
from ..errors import GenerationError, TransientError
from ..quota import QuotaTracker
from .vertex import GoogleRestClient, save_media

logger = logging.getLogger(__name__)


class GenerationStatus(str, Enum):
    """Status of a Veo long-running operation."""

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class VeoClient:
    """Client wrapper for Veo video generation via Vertex AI.

    This client handles:
    - Probing whether the configured Veo model is reachable
    - Submitting image-to-video requests
    - Polling the long-running operation until it finishes
    - Saving the video, downloading from GCS when an output bucket is used
    """

    # Default configuration
    DEFAULT_POLL_INTERVAL = 10.0  # seconds
    DEFAULT_MAX_POLL_TIME = 600.0  # 10 minutes
    MIN_DURATION = 5.0
    MAX_DURATION = 8.0

    def __init__(
        self,
        project_id: Optional[str] = None,
        location: Optional[str] = None,
        model: Optional[str] = None,
        output_bucket: Optional[str] = None,
        output_dir: Optional[Path] = None,
        quota: Optional[QuotaTracker] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_poll_time: float = DEFAULT_MAX_POLL_TIME,
    ) -> None:
        """Initialize the Veo client.

        Args:
            project_id: Google Cloud project ID. Defaults to GOOGLE_CLOUD_PROJECT env var.
            location: GCP region for Vertex AI.
            model: Veo model name.
            output_bucket: Optional GCS bucket (gs://...) for output videos.
                Without it, video bytes are returned inline.
            output_dir: Directory for downloaded MP4 files.
            quota: Optional tracker counting each request.
            poll_interval: Seconds between polling checks.
            max_poll_time: Maximum seconds to wait for generation.
        """
        self._project_id = project_id or config.google_cloud_project
        self._location = location or config.google_location
        self._model = model or config.veo_model
        self._output_bucket = output_bucket if output_bucket is not None else config.veo_output_bucket
        self._output_dir = output_dir or config.assets_dir
        self._poll_interval = poll_interval
        self._max_poll_time = max_poll_time
        self._rest = GoogleRestClient("Veo", quota=quota)
        self._storage_client: Optional[storage.Client] = None

        self._validate_config()

    def _validate_config(self) -> None:
        """Validate that required configuration is set."""
        if not self._project_id:
            raise ValueError(
                "Missing required configuration: GOOGLE_CLOUD_PROJECT. "
                "Set the corresponding environment variable."
            )

        # Validate bucket format
        if self._output_bucket and not self._output_bucket.startswith("gs://"):
            raise ValueError(
                f"VEO_OUTPUT_BUCKET must be a GCS URI starting with 'gs://'. "
                f"Got: {self._output_bucket}"
            )

    @property
    def model(self) -> str:
        return self._model

    @property
    def _model_path(self) -> str:
        return (
            f"https://{self._location}-aiplatform.googleapis.com/v1/"
            f"projects/{self._project_id}/locations/{self._location}/"
            f"publishers/google/models/{self._model}"
        )

    async def is_available(self) -> bool:
        """Check whether the Veo model can be reached with current credentials."""
        url = (
            f"https://{self._location}-aiplatform.googleapis.com/v1/"
            f"publishers/google/models/{self._model}"
        )
        try:
            await self._rest.get(url)
        except GenerationError as e:
            logger.info(f"Veo unavailable: {e}")
            return False
        return True

    def build_request(self, image_path: Path, motion_strength: float, duration: float) -> dict:
        mime_type = mimetypes.guess_type(image_path.name)[0] or "image/png"
        prompt = (
            "Bring this still image to life with subtle, natural camera and subject motion. "
            f"Motion intensity {motion_strength:g} on a scale of 1 to 10. "
            "Keep the composition and characters unchanged."
        )
        parameters: dict[str, Any] = {
            "durationSeconds": int(duration),
            "sampleCount": 1,
        }
        if self._output_bucket:
            parameters["storageUri"] = self._output_bucket.rstrip("/") + "/"
        return {
            "instances": [
                {
                    "prompt": prompt,
                    "image": {
                        "bytesBase64Encoded": base64.b64encode(image_path.read_bytes()).decode("ascii"),
                        "mimeType": mime_type,
                    },
                }
            ],
            "parameters": parameters,
        }

    async def generate_video(
        self, image: str, motion_strength: float, duration: float
    ) -> Optional[str]:
        """Animate an image into a short clip.

        Args:
            image: Path to the source image.
            motion_strength: Motion intensity hint.
            duration: Desired seconds; clamped to what Veo supports.

        Returns:
            Path of the saved MP4, or None if the operation finished without a
            video or did not finish in time.

        Raises:
            GenerationError: If submitting fails, or a poll fails with a
                quota or permanent error.
        """
        duration = max(self.MIN_DURATION, min(self.MAX_DURATION, duration))
        body = await asyncio.to_thread(self.build_request, Path(image), motion_strength, duration)

        logger.info(f"Starting Veo generation ({duration:.0f}s) from {image}")
        operation = await self._rest.post(
            f"{self._model_path}:predictLongRunning", body, model=self._model
        )
        operation_name = operation.get("name")
        if not operation_name:
            logger.warning("Veo returned no operation name")
            return None

        status, response = await self._poll_operation(operation_name)
        if status != GenerationStatus.COMPLETED:
            return None

        return await self._save_video(response)

    async def _poll_operation(self, operation_name: str) -> tuple[GenerationStatus, dict]:
        """Poll an operation until completion or timeout."""
        start_time = time.monotonic()
        poll_count = 0

        while True:
            elapsed = time.monotonic() - start_time
            if elapsed > self._max_poll_time:
                logger.warning(f"Operation {operation_name} timed out after {elapsed:.1f}s")
                return GenerationStatus.FAILED, {}

            poll_count += 1
            logger.debug(f"Polling operation (attempt {poll_count}): {operation_name}")

            # Transient poll errors keep waiting on the same operation
            try:
                data = await self._rest.post(
                    f"{self._model_path}:fetchPredictOperation",
                    {"operationName": operation_name},
                )
            except TransientError as e:
                logger.warning(f"Error polling operation {operation_name}: {e}")
                await asyncio.sleep(self._poll_interval)
                continue

            if data.get("done"):
                if "error" in data:
                    logger.error(f"Operation {operation_name} failed: {data['error']}")
                    return GenerationStatus.FAILED, data
                logger.info(f"Operation {operation_name} completed")
                return GenerationStatus.COMPLETED, data.get("response", {})

            await asyncio.sleep(self._poll_interval)

    async def _save_video(self, response: dict) -> Optional[str]:
        videos = response.get("videos") or []
        if not videos:
            filtered = response.get("raiMediaFilteredCount")
            logger.warning(f"Veo finished without a video (filtered: {filtered})")
            return None

        output_path = self._output_dir / f"video_{uuid.uuid4().hex[:12]}.mp4"
        video = videos[0]
        if video.get("bytesBase64Encoded"):
            await asyncio.to_thread(save_media, output_path, base64.b64decode(video["bytesBase64Encoded"]))
        elif video.get("gcsUri"):
            await asyncio.to_thread(self._download_from_gcs, video["gcsUri"], output_path)
        else:
            logger.warning("Veo video entry has neither bytes nor a GCS URI")
            return None

        logger.info(f"Saved generated video to {output_path}")
        return str(output_path)

    def _download_from_gcs(self, gcs_uri: str, local_path: Path) -> None:
        """Download a file from GCS to local path.

        Args:
            gcs_uri: GCS URI (gs://bucket/path/to/file).
            local_path: Local path to save the file.
        """
        # Parse GCS URI
        if not gcs_uri.startswith("gs://"):
            raise ValueError(f"Invalid GCS URI: {gcs_uri}")

        uri_parts = gcs_uri[5:].split("/", 1)
        if len(uri_parts) != 2:
            raise ValueError(f"Invalid GCS URI format: {gcs_uri}")

        bucket_name, blob_name = uri_parts

        # Ensure local directory exists
        local_path.parent.mkdir(parents=True, exist_ok=True)

        if self._storage_client is None:
            self._storage_client = storage.Client(project=self._project_id)
        bucket = self._storage_client.bucket(bucket_name)
        bucket.blob(blob_name).download_to_filename(str(local_path))
        logger.debug(f"Downloaded {gcs_uri} to {local_path}")
