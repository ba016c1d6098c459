"""LLM report generation for TG Reporter.

Turns a region's analysis artifact and a sample of its messages into a
plain-text analytical report.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

from .cache import ContentCache
from .config import Config
from .llm_client import DeepSeekClient
from .models import AnalysisArtifact, MessageRecord
from .parser import RecordParser
from .sources import RegionSource
from .storage import ArtifactStore

logger = logging.getLogger(__name__)


SAMPLE_MESSAGE_LIMIT = 50
TOP_PHRASES_IN_PROMPT = 5

# Genitive form used in "Учитывай языковые особенности ... языка"
LANGUAGE_NAMES = {
    "english": "английского",
    "russian": "русского",
}
DEFAULT_LANGUAGE_NAME = "русского и украинского"

REPORT_PROMPT_TEMPLATE = """Проанализируй сообщения из чатов на русском и украинском языке и создай аналитический отчет.
Используй только ключевые данные и основные выводы, без излишней детализации.

Контекст:
- География: {region_name}
- Всего сообщений: {total_messages}
- Период анализа: последние 7 дней

Основные метрики:
1. Эмоциональный фон:
   - Позитивных: {positive} ({positive_pct}%)
   - Негативных: {negative} ({negative_pct}%)
   - Нейтральных: {neutral} ({neutral_pct}%)

2. Топ-{phrase_limit} популярных фраз:
{phrases}

3. Распределение по темам:
{themes}

4. Потребности и проблемы:
{needs}

Примеры сообщений:
{sample_messages}

Требования к отчету:
1. Структура:
   - Среднее резюме (10-12 предложений)
   - Детальный анализ по темам
   - Эмоциональная картина
   - Проблемы и потребности
   - Рекомендации

2. Особенности:
   - Учитывай языковые особенности {language_name} языка
   - Анализируй контекст фраз, а не только частоту
   - Выявляй скрытые проблемы
   - Предлагай практические решения

3. Формат:
   - Четкая структура с заголовками
   - Без markdown разметки (##, **, ---)
   - Простой текстовый формат
   - Конкретные цифры и примеры
"""


def _percent(part: int, total: int) -> int:
    return round(part / total * 100) if total else 0


def build_prompt(
    region_name: str,
    artifact: AnalysisArtifact,
    messages: Sequence[MessageRecord],
    language: str = "",
) -> str:
    """Build the report prompt from an artifact and sample messages."""
    total = artifact.message_count
    sentiments = artifact.sentiments

    phrases = "\n".join(
        f'- "{p.phrase}" ({p.count} раз)'
        for p in artifact.top_phrases[:TOP_PHRASES_IN_PROMPT]
    ) or "- нет данных"
    themes = "\n".join(
        f"- {name}: {count} сообщений" for name, count in artifact.theme_count.items()
    ) or "- нет данных"
    needs = "\n".join(
        f"- {name}: {count} сообщений" for name, count in artifact.needs_count.items()
    ) or "- нет данных"

    samples = [m for m in messages if m.body][:SAMPLE_MESSAGE_LIMIT]
    sample_messages = "\n".join(
        f"[{m.timestamp.strftime('%Y-%m-%d')}] {' '.join(m.body.split())}" for m in samples
    ) or "- нет сообщений"

    return REPORT_PROMPT_TEMPLATE.format(
        region_name=region_name,
        total_messages=total,
        positive=sentiments.positive,
        negative=sentiments.negative,
        neutral=sentiments.neutral,
        positive_pct=_percent(sentiments.positive, total),
        negative_pct=_percent(sentiments.negative, total),
        neutral_pct=_percent(sentiments.neutral, total),
        phrase_limit=TOP_PHRASES_IN_PROMPT,
        phrases=phrases,
        themes=themes,
        needs=needs,
        sample_messages=sample_messages,
        language_name=LANGUAGE_NAMES.get(language, DEFAULT_LANGUAGE_NAME),
    )


class ReportGenerator:
    """Generates, saves and caches per-region LLM reports."""

    def __init__(
        self,
        llm: DeepSeekClient,
        config: Config,
        cache: Optional[ContentCache] = None,
    ):
        self.llm = llm
        self.config = config
        self.store = ArtifactStore(config.paths)
        self.source = RegionSource(config.paths)
        self.cache = cache or ContentCache(config.paths.cache, config.cache_ttl)

    def report_path(self, region: str) -> Path:
        return self.config.paths.reports / f"report_{region}.txt"

    def generate_report(self, region: str, force_new: bool = False) -> str:
        """
        Return the report for a region, from cache unless ``force_new``.

        Raises:
            ValueError: If the region is not configured
            NoAnalysisDataError: If the region has not been analyzed
            SourceNotFoundError: If the region's messages are missing
            LLMError: If the model call fails after retries
        """
        region_config = self.config.get_region(region)
        logger.info(f"Generating report for {region} using {self.llm.model}")

        if not force_new:
            cached = self.cache.get("report", region)
            if cached:
                logger.info(f"Using cached report for {region}")
                return cached

        artifact = self.store.load(region)
        messages = RecordParser().parse(self.source.get_source_text(region), region)

        prompt = build_prompt(
            region_config.name,
            artifact,
            messages,
            language=self.config.language_for(region),
        )
        report = self.llm.generate(prompt, max_tokens=self.config.llm.max_tokens)

        path = self.report_path(region)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(report, encoding="utf-8")

        self.cache.set("report", region, report)
        logger.info(f"Report for {region} generated and saved")
        return report

    def load_saved_report(self, region: str) -> Optional[str]:
        """Last report written for a region, if any."""
        path = self.report_path(region)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")
