"""Application configuration."""
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )

    # App settings
    app_name: str = "ViralCut"
    debug: bool = True

    # Server settings
    host: str = "0.0.0.0"
    port: int = 3001
    public_base_url: str = "http://localhost:3001"

    # Data directories
    upload_dir: Path = Path("./data/uploads")
    output_dir: Path = Path("./data/generated")

    # FFmpeg settings
    ffmpeg_path: str = "ffmpeg"

    # yt-dlp settings
    ytdlp_path: str = "yt-dlp"
    preferred_format_id: str = "18"  # 360p progressive mp4

    # Render profile (fast previews, not archival quality)
    render_video_codec: str = "libx264"
    render_video_preset: str = "ultrafast"
    render_video_crf: int = 30
    render_audio_codec: str = "aac"
    render_audio_bitrate: str = "96k"
    render_audio_channels: int = 1
    render_pixel_format: str = "yuv420p"

    # Probe tuning for remote streams
    stream_analyzeduration: int = 0
    stream_probesize: int = 32

    # Frontend
    frontend_url: str = "http://localhost:5173"


settings = Settings()

# Ensure directories exist
settings.upload_dir.mkdir(parents=True, exist_ok=True)
settings.output_dir.mkdir(parents=True, exist_ok=True)
