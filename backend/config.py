import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Runtime configuration read from the environment"""

    access_password: str = ""
    google_api_key: str = ""
    gemini_api_base: str = "https://generativelanguage.googleapis.com"
    hair_edit_model: str = "gemini-2.0-flash"
    fashion_edit_model: str = "gemini-2.5-flash-image"
    remote_timeout_seconds: float = 60.0
    hair_mask_strategy: str = "color"
    face_model_path: str = "face_landmarker.task"
    log_file: str = "analysis_log.txt"
    max_image_width: int = 800

    @classmethod
    def from_env(cls):
        return cls(
            access_password=os.environ.get("ACCESS_PASSWORD", ""),
            google_api_key=os.environ.get("GOOGLE_API_KEY", ""),
            gemini_api_base=os.environ.get("GEMINI_API_BASE", cls.gemini_api_base),
            hair_edit_model=os.environ.get("HAIR_EDIT_MODEL", cls.hair_edit_model),
            fashion_edit_model=os.environ.get("FASHION_EDIT_MODEL", cls.fashion_edit_model),
            remote_timeout_seconds=float(os.environ.get("REMOTE_TIMEOUT_SECONDS", cls.remote_timeout_seconds)),
            hair_mask_strategy=os.environ.get("HAIR_MASK_STRATEGY", cls.hair_mask_strategy),
            face_model_path=os.environ.get("FACE_MODEL_PATH", cls.face_model_path),
            log_file=os.environ.get("LOG_FILE", cls.log_file),
            max_image_width=int(os.environ.get("MAX_IMAGE_WIDTH", cls.max_image_width)),
        )

    @property
    def remote_configured(self):
        return bool(self.access_password and self.google_api_key)
