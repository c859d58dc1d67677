import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from .openai_llm import DEFAULT_MODEL


class Settings(BaseModel):
    openai_api_key: str = ""
    openai_model: str = DEFAULT_MODEL

    data_path: str = "data/lean_df.csv"
    output_dir: str = "outputs"

    log_level: str = "INFO"

    @property
    def has_credentials(self) -> bool:
        return bool(self.openai_api_key)

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "Settings":
        # read once at startup; everything downstream gets the instance
        load_dotenv(dotenv_path)
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            openai_model=os.getenv("OPENAI_MODEL", DEFAULT_MODEL),
            data_path=os.getenv("BRT_PULSE_DATA", "data/lean_df.csv"),
            output_dir=os.getenv("BRT_PULSE_OUTPUT_DIR", "outputs"),
            log_level=os.getenv("BRT_PULSE_LOG_LEVEL", "INFO").upper(),
        )
