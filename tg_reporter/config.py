"""Configuration schema and validation for TG Reporter."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

logger = logging.getLogger(__name__)


DEFAULT_LANGUAGE = "english"
DEFAULT_CACHE_TTL = 3600
DEFAULT_DATA_DIR = "data"

SUPPORTED_LANGUAGES = ("english", "russian")


def resolve_language(
    language: Optional[str],
    default: str = DEFAULT_LANGUAGE,
    supported: Iterable[str] = SUPPORTED_LANGUAGES,
) -> str:
    """Return the language if it has a lexicon, otherwise the default."""
    if not language:
        return default
    if language not in supported:
        logger.warning(f"No lexicon for language '{language}', using {default}")
        return default
    return language


@dataclass
class PathConfig:
    """Directory layout for raw, analyzed and generated files."""

    raw: Path
    analyzed: Path
    reports: Path
    charts: Path
    cache: Path

    @classmethod
    def from_data_dir(cls, data_dir: str = DEFAULT_DATA_DIR) -> "PathConfig":
        """Build the standard layout under one data directory."""
        base = Path(data_dir)
        return cls(
            raw=base / "raw",
            analyzed=base / "analyzed",
            reports=base / "reports",
            charts=base / "charts",
            cache=base / "cache",
        )

    def ensure(self) -> "PathConfig":
        """Create all directories if they don't exist."""
        for directory in (self.raw, self.analyzed, self.reports, self.charts, self.cache):
            directory.mkdir(parents=True, exist_ok=True)
        return self


@dataclass
class RegionConfig:
    """One geographic market whose chats are analyzed independently."""

    code: str
    name: str
    chat_ids: list[int] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    timezone: str = "UTC"
    active: bool = True


@dataclass
class LLMSettings:
    """Settings for the report-writing model."""

    model: str = "deepseek-reasoner"
    base_url: str = "https://api.deepseek.com/v1"
    max_tokens: int = 4000
    timeout: int = 600
    max_retries: int = 3


@dataclass
class Config:
    """Complete configuration for TG Reporter."""

    paths: PathConfig = field(default_factory=PathConfig.from_data_dir)
    regions: dict[str, RegionConfig] = field(default_factory=dict)
    languages: dict[str, str] = field(default_factory=dict)
    themes: dict[str, list[str]] = field(default_factory=dict)
    needs_and_pains: dict[str, list[str]] = field(default_factory=dict)
    cache_ttl: int = DEFAULT_CACHE_TTL
    llm: LLMSettings = field(default_factory=LLMSettings)

    def get_region(self, code: str) -> RegionConfig:
        """Look up a region, raising ValueError for unknown codes."""
        region = self.regions.get(code)
        if region is None:
            raise ValueError(f"Invalid region code: {code}")
        return region

    def active_regions(self) -> list[str]:
        """Codes of regions that take part in a full refresh."""
        return [code for code, region in self.regions.items() if region.active]

    def language_for(self, region: str) -> str:
        """Language used for a region's lexicon and stemmer."""
        return resolve_language(self.languages.get(region))

    @classmethod
    def from_dict(cls, data: dict, base_dir: Optional[Path] = None) -> "Config":
        """Create Config from dictionary."""
        paths_data = data.get("paths", {})
        data_dir = Path(paths_data.get("dataDir", DEFAULT_DATA_DIR))
        if base_dir is not None and not data_dir.is_absolute():
            data_dir = base_dir / data_dir
        paths = PathConfig.from_data_dir(str(data_dir))

        regions = {}
        for code, region_data in data.get("regions", {}).items():
            regions[code] = RegionConfig(
                code=code,
                name=region_data.get("name", code),
                chat_ids=list(region_data.get("chatIds", [])),
                keywords=list(region_data.get("keywords", [])),
                timezone=region_data.get("timezone", "UTC"),
                active=region_data.get("active", True),
            )

        # Per-region "language" is shorthand for an entry in the languages table
        languages = dict(data.get("languages", {}))
        for code, region_data in data.get("regions", {}).items():
            if region_data.get("language"):
                languages.setdefault(code, region_data["language"])

        llm_data = data.get("llm", {})
        llm = LLMSettings(
            model=llm_data.get("model", LLMSettings.model),
            base_url=llm_data.get("baseUrl", LLMSettings.base_url),
            max_tokens=int(llm_data.get("maxTokens", LLMSettings.max_tokens)),
            timeout=int(llm_data.get("timeout", LLMSettings.timeout)),
            max_retries=int(llm_data.get("maxRetries", LLMSettings.max_retries)),
        )

        return cls(
            paths=paths,
            regions=regions,
            languages=languages,
            themes={k: list(v) for k, v in data.get("themes", {}).items()},
            needs_and_pains={k: list(v) for k, v in data.get("needsAndPains", {}).items()},
            cache_ttl=int(data.get("cacheTtlSeconds", DEFAULT_CACHE_TTL)),
            llm=llm,
        )

    @classmethod
    def load(cls, filepath: str) -> "Config":
        """Load configuration from JSON file.

        A relative ``paths.dataDir`` is resolved against the config file's folder.
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {filepath}")

        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        return cls.from_dict(data, base_dir=path.parent)

    @classmethod
    def default(cls) -> "Config":
        """Configuration built from SAMPLE_CONFIG."""
        return cls.from_dict(SAMPLE_CONFIG)


class ConfigValidator:
    """Validates configuration files."""

    def __init__(self):
        self.errors: list[str] = []
        self.warnings: list[str] = []

    def validate(self, config_path: str) -> tuple[bool, list[str], list[str]]:
        """
        Validate a config file.

        Returns:
            Tuple of (is_valid, errors, warnings)
        """
        self.errors = []
        self.warnings = []

        path = Path(config_path)

        if not path.exists():
            self.errors.append(f"Config file not found: {config_path}")
            return False, self.errors, self.warnings

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            self.errors.append(f"Invalid JSON: {e}")
            return False, self.errors, self.warnings

        return self.validate_data(data)

    def validate_data(self, data: dict) -> tuple[bool, list[str], list[str]]:
        """Validate an already-decoded config dictionary."""
        if not isinstance(data, dict):
            self.errors.append("Config must be a JSON object")
            return False, self.errors, self.warnings

        regions = data.get("regions")
        if regions is None:
            self.errors.append("Missing required field: regions")
        elif not isinstance(regions, dict):
            self.errors.append("regions must be an object keyed by region code")
        else:
            if not regions:
                self.warnings.append("regions is empty; nothing will be processed")
            for code, region in regions.items():
                if not isinstance(region, dict):
                    self.errors.append(f"regions.{code} must be an object")
                    continue
                if not region.get("name"):
                    self.warnings.append(f"regions.{code} missing name field")
                if "chatIds" in region and not isinstance(region["chatIds"], list):
                    self.errors.append(f"regions.{code}.chatIds must be an array")
                language = region.get("language")
                if language and language not in SUPPORTED_LANGUAGES:
                    self.warnings.append(
                        f"regions.{code}.language '{language}' is not supported, "
                        f"{DEFAULT_LANGUAGE} will be used"
                    )

        for section in ("themes", "needsAndPains"):
            if section not in data:
                self.warnings.append(f"{section} not defined; its counts will be empty")
                continue
            taxonomy = data[section]
            if not isinstance(taxonomy, dict):
                self.errors.append(f"{section} must be an object of category -> keywords")
                continue
            for category, keywords in taxonomy.items():
                if not isinstance(keywords, list):
                    self.errors.append(f"{section}.{category} must be an array")
                elif not keywords:
                    self.warnings.append(f"{section}.{category} has no keywords")
                elif any(k != k.lower() for k in keywords if isinstance(k, str)):
                    self.warnings.append(
                        f"{section}.{category} has uppercase keywords; matching is case-insensitive"
                    )

        languages = data.get("languages", {})
        if not isinstance(languages, dict):
            self.errors.append("languages must be an object of region -> language")
        else:
            for code, language in languages.items():
                if language not in SUPPORTED_LANGUAGES:
                    self.warnings.append(
                        f"languages.{code} '{language}' is not supported, "
                        f"{DEFAULT_LANGUAGE} will be used"
                    )

        if "cacheTtlSeconds" in data:
            try:
                if int(data["cacheTtlSeconds"]) < 0:
                    self.errors.append("cacheTtlSeconds must not be negative")
            except (ValueError, TypeError):
                self.errors.append("cacheTtlSeconds must be a number")

        is_valid = len(self.errors) == 0
        return is_valid, self.errors, self.warnings


# Sample config for documentation and as the built-in default
SAMPLE_CONFIG = {
    "paths": {"dataDir": "data"},
    "cacheTtlSeconds": 3600,
    "regions": {
        "DEU": {
            "name": "Германия",
            "chatIds": [-1002158812012, -1001783625336],
            "keywords": ["germany", "deutschland", "берлин"],
            "timezone": "Europe/Berlin",
            "active": True,
        },
        "ESP": {
            "name": "Испания",
            "chatIds": [-1001727866141, -1001713113247],
            "keywords": ["spain", "españa", "мадрид"],
            "timezone": "Europe/Madrid",
            "active": True,
        },
        "PRT": {
            "name": "Португалия",
            "chatIds": [-1002239405289, -1001590941393],
            "keywords": ["portugal", "португалия", "лиссабон"],
            "timezone": "Europe/Lisbon",
            "active": True,
        },
        "POL": {
            "name": "Польша",
            "chatIds": [-1002240564002, -1001791241899],
            "keywords": ["poland", "польша", "польща"],
            "timezone": "Europe/Warsaw",
            "active": True,
        },
        "SWE": {
            "name": "Швеция",
            "chatIds": [-1001807287474],
            "keywords": ["sweden", "sverige", "стокгольм"],
            "timezone": "Europe/Stockholm",
            "active": True,
        },
        "FRA": {
            "name": "Франция",
            "chatIds": [-1001628623605],
            "keywords": ["france", "français", "париж"],
            "timezone": "Europe/Paris",
            "active": True,
        },
        "CZE": {
            "name": "Чехия",
            "chatIds": [-1002235848488],
            "keywords": ["czech", "česko", "прага", "чехия"],
            "timezone": "Europe/Prague",
            "active": True,
        },
        "ITA": {
            "name": "Италия",
            "chatIds": [-1002281168644],
            "keywords": ["italy", "italia", "рим", "италия"],
            "timezone": "Europe/Rome",
            "active": True,
        },
    },
    "languages": {
        "DEU": "english",
        "ESP": "english",
        "PRT": "english",
        "RUS": "russian",
    },
    "themes": {
        "Жильё": ["жиль", "квартир", "аренд", "housing", "apartment"],
        "Работа": ["работ", "ваканси", "зарплат", "job", "work"],
        "Документы": ["документ", "виз", "внж", "паспорт", "visa"],
        "Медицина": ["врач", "больниц", "страховк", "doctor", "insurance"],
        "Образование": ["школ", "садик", "университет", "курс", "school"],
    },
    "needsAndPains": {
        "Поиск жилья": ["ищу жиль", "ищу квартир", "сниму", "need housing"],
        "Языковой барьер": ["язык", "перевод", "переводчик", "translate"],
        "Финансовая помощь": ["деньг", "выплат", "пособи", "money"],
        "Юридическая помощь": ["юрист", "адвокат", "консультац", "lawyer"],
    },
    "llm": {
        "model": "deepseek-reasoner",
        "baseUrl": "https://api.deepseek.com/v1",
        "maxTokens": 4000,
        "timeout": 600,
        "maxRetries": 3,
    },
}


def generate_sample_config(output_path: str = "docs/sample-config.json") -> Path:
    """Generate a sample config file."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(SAMPLE_CONFIG, f, indent=2, ensure_ascii=False)

    return path
