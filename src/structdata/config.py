from dotenv import load_dotenv
from dataclasses import dataclass
from pathlib import Path
import json
import logging
import os

load_dotenv()  # Loads variables from .env file

logger = logging.getLogger(__name__)


class Settings:
    """
    Manages application settings loaded from environment variables.
    """
    LOG_LEVEL = os.getenv("STRUCTDATA_LOG_LEVEL", "WARNING")
    LOG_FILE = os.getenv("STRUCTDATA_LOG_FILE")
    USER_AGENT = os.getenv(
        "STRUCTDATA_USER_AGENT",
        "Mozilla/5.0 (compatible; StructData-Analyzer/1.0)",
    )
    TIMEOUT = int(os.getenv("STRUCTDATA_TIMEOUT", "30"))
    MAX_RETRIES = int(os.getenv("STRUCTDATA_MAX_RETRIES", "3"))


settings = Settings()


@dataclass
class AnalysisThresholds:
    """Configurable thresholds for structured data analysis."""

    # FAQ validation
    faq_min_items: int = 2
    faq_question_min_length: int = 10
    faq_question_max_length: int = 150
    faq_answer_min_length: int = 25

    # Breadcrumb validation
    breadcrumb_min_items: int = 2

    # Product validation
    product_description_min_length: int = 50

    # Score composition
    presence_points: int = 30
    points_per_format: int = 5
    max_format_points: int = 15
    points_per_item: int = 3
    full_item_count: int = 5  # Items at which the item bonus is flat
    max_item_points: int = 15
    points_per_type: int = 2
    full_type_count: int = 5  # Types at which the diversity bonus is flat
    max_type_points: int = 10
    error_penalty: int = 3
    max_error_penalty: int = 20
    warning_penalty: int = 1
    max_warning_penalty: int = 10
    special_validation_points: int = 20

    # Recommendations
    max_recommendations: int = 10
    suggested_type_count: int = 3

    # Validation engine suggestions
    max_nesting_depth: int = 5
    many_items_threshold: int = 10

    @classmethod
    def from_env(cls) -> "AnalysisThresholds":
        """Load thresholds from environment variables.

        Environment variables should be prefixed with STRUCTDATA_THRESHOLD_
        e.g., STRUCTDATA_THRESHOLD_FAQ_ANSWER_MIN_LENGTH=40

        Returns:
            AnalysisThresholds with values from environment
        """
        thresholds = cls()
        prefix = "STRUCTDATA_THRESHOLD_"

        for field_name in thresholds.__dataclass_fields__:
            env_key = f"{prefix}{field_name.upper()}"
            env_value = os.getenv(env_key)

            if env_value is not None:
                try:
                    setattr(thresholds, field_name, int(env_value))
                except ValueError:
                    logger.warning(f"Ignoring {env_key}={env_value!r}: not an integer")

        return thresholds

    @classmethod
    def from_file(cls, path: str) -> "AnalysisThresholds":
        """Load thresholds from a JSON configuration file.

        Values in the file override those from the environment.

        Args:
            path: Path to JSON configuration file

        Returns:
            AnalysisThresholds with values from file
        """
        thresholds = cls.from_env()
        file_path = Path(path)

        if not file_path.exists():
            return thresholds

        with open(file_path, 'r') as f:
            config = json.load(f)

        threshold_config = config.get('thresholds', config)

        for field_name in thresholds.__dataclass_fields__:
            if field_name in threshold_config:
                setattr(thresholds, field_name, threshold_config[field_name])

        return thresholds

    def to_dict(self) -> dict:
        """Convert thresholds to dictionary.

        Returns:
            Dictionary of all threshold values
        """
        return {
            field_name: getattr(self, field_name)
            for field_name in self.__dataclass_fields__
        }


# Global default thresholds instance
default_thresholds = AnalysisThresholds()
