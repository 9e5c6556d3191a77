import os
import json
from typing import Optional, Tuple
from pydantic import BaseModel, Field, ValidationError
from mt2_draft.logger import create_logger
from mt2_draft import constants

logger = create_logger()


class Settings(BaseModel):
    champion_id: str = constants.DEFAULT_CHAMPION_ID
    champion_path: str = constants.DEFAULT_CHAMPION_PATH
    covenant_level: int = constants.DEFAULT_COVENANT
    cards_file: str = constants.CARDS_FILE
    rules_file: str = ""
    ocr_url: str = ""
    ocr_api_key: str = ""
    ocr_min_confidence: float = Field(default=constants.OCR_MIN_CONFIDENCE, ge=0.0, le=1.0)


class Features(BaseModel):
    concurrent_scoring_enabled: bool = True
    batch_workers: int = Field(default=constants.DEFAULT_BATCH_WORKERS, ge=1)
    ocr_enabled: bool = False


class Configuration(BaseModel):
    settings: Settings = Settings()
    features: Features = Features()
    version: float = constants.APPLICATION_VERSION

    @property
    def batch_workers(self) -> int:
        """Worker count for batch scoring; 1 when concurrency is disabled"""
        if not self.features.concurrent_scoring_enabled:
            return 1
        return self.features.batch_workers


def get_config_path() -> str:
    return os.path.join(os.getcwd(), constants.CONFIG_FILE_NAME)


def read_configuration(file_location: Optional[str] = None) -> Tuple[Configuration, bool]:
    """
    Read the configuration file.
    Returns the defaults and False when the file is missing or invalid.
    """
    file_location = file_location or get_config_path()
    try:
        with open(file_location, "r", encoding="utf-8") as data:
            config_data = json.load(data)
        return Configuration.model_validate(config_data), True
    except FileNotFoundError:
        return Configuration(), False
    except (OSError, json.JSONDecodeError, ValidationError) as error:
        logger.error(f"Unable to read configuration {file_location}: {error}")
        return Configuration(), False


def write_configuration(
    configuration: Configuration, file_location: Optional[str] = None
) -> bool:
    file_location = file_location or get_config_path()
    try:
        with open(file_location, "w", encoding="utf-8") as file:
            json.dump(configuration.model_dump(), file, ensure_ascii=False, indent=4)
        return True
    except OSError as error:
        logger.error(f"Unable to write configuration {file_location}: {error}")
        return False


def reset_configuration(file_location: Optional[str] = None) -> bool:
    """Overwrites the configuration file with the defaults"""
    return write_configuration(Configuration(), file_location)
