"""Persisted user preferences."""
from trip_budget.observable import Observer, StateCell, Subscription
from trip_budget.storage.store import LANGUAGE_KEY, BaseStore
from trip_budget.utils.errors import PersistenceWriteFailed, ValidationError
from trip_budget.utils.logging import get_logger

logger = get_logger(__name__)

SUPPORTED_LANGUAGES = ("ar", "en")
DEFAULT_LANGUAGE = "ar"


class LanguagePreference:
    """Preferred display language, observable and stored under ``preferred-language``."""

    def __init__(self, store: BaseStore):
        self.store = store
        stored = store.get(LANGUAGE_KEY)
        if stored not in SUPPORTED_LANGUAGES:
            if stored is not None:
                logger.warning(f"Unknown stored language {stored!r}; using {DEFAULT_LANGUAGE}")
            stored = DEFAULT_LANGUAGE
        self._cell: StateCell[str] = StateCell(stored, name="language")

    @property
    def language(self) -> str:
        return self._cell.value

    @property
    def is_arabic(self) -> bool:
        return self._cell.value == "ar"

    def set(self, language: str) -> None:
        language = (language or "").strip().lower()
        if language not in SUPPORTED_LANGUAGES:
            raise ValidationError(f"Unsupported language: {language!r}. Must be one of {list(SUPPORTED_LANGUAGES)}")
        try:
            self.store.set(LANGUAGE_KEY, language)
        except PersistenceWriteFailed as e:
            logger.warning(str(e), extra={"store_key": LANGUAGE_KEY, "error": e.reason})
        self._cell.set(language)

    def toggle(self) -> str:
        self.set("en" if self.is_arabic else "ar")
        return self.language

    def subscribe(self, observer: Observer, emit_current: bool = False) -> Subscription:
        return self._cell.subscribe(observer, emit_current=emit_current)
