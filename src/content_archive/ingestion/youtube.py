import asyncio
import contextlib
import logging
import tempfile
from pathlib import Path
from typing import List, Optional

from ..config import settings
from ..exceptions import ExtractionFailed, SubtitlesNotFound
from ..models.document import Document, DocumentKind
from ..normalization.transcript_normalizer import TranscriptNormalizer
from .base import BaseSource
from .locators import video_id as parse_video_id

logger = logging.getLogger(__name__)


class YtDlpClient:
    """Thin async wrapper around the yt-dlp executable."""

    def __init__(self, binary: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self.binary = binary or settings.ytdlp_binary
        self.timeout = timeout if timeout is not None else settings.subprocess_timeout

    async def _run(self, args: List[str], cwd: Optional[Path] = None) -> str:
        """
        Run yt-dlp and return its stdout.

        Raises:
            ExtractionFailed: Executable missing, timeout or non-zero exit
        """
        try:
            proc = await asyncio.create_subprocess_exec(
                self.binary, *args,
                cwd=str(cwd) if cwd else None,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ExtractionFailed(f"Could not start {self.binary}: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise ExtractionFailed(f"{self.binary} timed out after {self.timeout}s") from e
        finally:
            # also reached on cancellation; the child must not outlive the call
            if proc.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    proc.kill()
                await proc.wait()

        if proc.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip().splitlines()
            detail = message[-1] if message else f"exit code {proc.returncode}"
            raise ExtractionFailed(f"{self.binary} failed: {detail}")

        return stdout.decode("utf-8", errors="replace")

    async def get_title(self, url: str) -> str:
        return (await self._run(["--get-title", "--no-playlist", url])).strip()

    async def download_subtitles(self, url: str, video_id: str, language: str, workdir: Path) -> Optional[Path]:
        """
        Write the VTT track for `url` into `workdir`.

        Returns:
            Path of the track, or None if yt-dlp succeeded but no track exists for `language`
        """
        await self._run(
            [
                "--write-sub", "--write-auto-sub",
                "--sub-lang", language,
                "--skip-download",
                "--sub-format", "vtt",
                "--no-playlist",
                "-o", "%(id)s.%(ext)s",
                url,
            ],
            cwd=workdir,
        )
        tracks = sorted(p for p in workdir.iterdir() if video_id in p.name and p.suffix == ".vtt")
        return tracks[0] if tracks else None


class YouTubeSource(BaseSource):
    """Downloads a video's subtitle track and converts it into a transcript."""

    def __init__(
        self,
        ytdlp: Optional[YtDlpClient] = None,
        normalizer: Optional[TranscriptNormalizer] = None,
        language: Optional[str] = None,
        workdir: Optional[Path] = None,
    ) -> None:
        self.ytdlp = ytdlp or YtDlpClient()
        self.normalizer = normalizer or TranscriptNormalizer()
        self.language = language or settings.subtitle_language
        self.workdir = workdir

    async def extract(self, locator: str, created_at: int) -> Document:
        video_id = parse_video_id(locator)
        logger.info(f"Processing video ID: {video_id}")

        logger.info("Fetching video title")
        title = await self.ytdlp.get_title(locator) or video_id
        logger.info(f"Video title: {title}")

        with tempfile.TemporaryDirectory(prefix=f"{video_id}_", dir=self.workdir, ignore_cleanup_errors=True) as tmp:
            track: Optional[Path] = None
            try:
                logger.info("Downloading subtitles")
                track = await self.ytdlp.download_subtitles(locator, video_id, self.language, Path(tmp))
                if track is None:
                    raise SubtitlesNotFound(f"No '{self.language}' subtitle track found for {video_id}")

                logger.info("Converting VTT to text")
                transcript = self.normalizer.normalize(track.read_text(encoding="utf-8", errors="replace"))
            except OSError as e:
                raise ExtractionFailed(f"Could not read subtitle track for {video_id}: {e}") from e
            finally:
                if track is not None:
                    try:
                        track.unlink(missing_ok=True)
                        logger.info("Temporary VTT file removed")
                    except OSError as e:
                        logger.warning(f"Could not remove temporary track {track}: {e}")

        return Document(
            id=f"{created_at}_{video_id}",
            kind=DocumentKind.TRANSCRIPT,
            title=title,
            source_url=locator,
            source_ref=video_id,
            created_at=created_at,
            body=transcript,
        )
