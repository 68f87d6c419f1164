"""Google Cloud Text-to-Speech client."""

import asyncio
import base64
import logging
import uuid
from pathlib import Path
from typing import Optional

from ..config import config
from ..models import VoiceTone
from ..quota import QuotaTracker
from .vertex import GoogleRestClient, save_media

logger = logging.getLogger(__name__)

SYNTHESIZE_URL = "https://texttospeech.googleapis.com/v1/text:synthesize"

# speakingRate, pitch (semitones), volumeGainDb
TONE_SETTINGS = {
    VoiceTone.EXCITED: (1.15, 2.0, 0.0),
    VoiceTone.SERIOUS: (0.95, -2.0, 0.0),
    VoiceTone.CALM: (0.9, 0.0, 0.0),
    VoiceTone.WHISPER: (0.85, -4.0, -6.0),
}


class SpeechClient:
    """Synthesizes narration audio as MP3."""

    MODEL_NAME = "cloud-tts"

    def __init__(
        self,
        language_code: Optional[str] = None,
        voice_name: Optional[str] = None,
        output_dir: Optional[Path] = None,
        quota: Optional[QuotaTracker] = None,
    ) -> None:
        self._language_code = language_code or config.tts_language
        self._voice_name = voice_name
        self._output_dir = output_dir or config.assets_dir
        self._rest = GoogleRestClient("Text-to-Speech", quota=quota)

    def build_request(self, text: str, tone: VoiceTone) -> dict:
        rate, pitch, gain = TONE_SETTINGS[tone]
        voice = {"languageCode": self._language_code}
        if self._voice_name:
            voice["name"] = self._voice_name
        return {
            "input": {"text": text},
            "voice": voice,
            "audioConfig": {
                "audioEncoding": "MP3",
                "speakingRate": rate,
                "pitch": pitch,
                "volumeGainDb": gain,
            },
        }

    async def generate_speech(self, text: str, tone: VoiceTone) -> Optional[str]:
        """Synthesize ``text`` in the given tone.

        Returns:
            Path of the saved MP3, or None if no audio came back.
        """
        if not text.strip():
            logger.warning("Empty narration; nothing to synthesize")
            return None

        logger.info(f"Synthesizing speech ({tone.value}, {len(text)} chars)")
        data = await self._rest.post(
            SYNTHESIZE_URL, self.build_request(text, tone), model=self.MODEL_NAME
        )

        audio = data.get("audioContent")
        if not audio:
            logger.warning("No audio content in Text-to-Speech response")
            return None

        output_path = self._output_dir / f"voice_{uuid.uuid4().hex[:12]}.mp3"
        await asyncio.to_thread(save_media, output_path, base64.b64decode(audio))
        logger.info(f"Saved narration to {output_path}")
        return str(output_path)
