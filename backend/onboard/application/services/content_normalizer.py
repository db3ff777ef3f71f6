"""Content normalizer — turns noisy scraped/extracted text into a clean document.

Pipeline (order matters):
    1. Collapse whitespace runs and 3+ blank lines
    2. Strip UI-chrome fragments (keyboard shortcuts, "(X)" shortcut hints, menu arrows)
    3. Drop short lines repeated more than twice (navigation chrome)
    4. Drop lines made only of one or two navigation words
    5. Prepend a header block (title, source, extraction timestamp) and a rule

The transformation is deterministic: identical input (including
``extracted_at``) always yields byte-identical output.
"""

import logging
import re
from collections import Counter
from datetime import datetime, timezone

from onboard.domain.entities import NormalizedDocument

logger = logging.getLogger(__name__)

# ── Thresholds ───────────────────────────────────────────────────────
_REPEATED_LINE_MAX_LENGTH = 60
_REPEATED_LINE_MIN_OCCURRENCES = 3  # "appears more than twice"
_NAV_LINE_MAX_TOKENS = 2

HEADER_RULE = "---"

# ── Whitespace ───────────────────────────────────────────────────────
_INLINE_WHITESPACE_RE = re.compile(r"[ \t\f\v ]+")
_MULTI_NEWLINE_RE = re.compile(r"\n{3,}")

# ── UI chrome ────────────────────────────────────────────────────────
_CHROME_PATTERNS: tuple[re.Pattern[str], ...] = (
    # Ctrl+C, Ctrl + Shift + V, Cmd+K, Alt+F4, Shift+Enter
    re.compile(
        r"\b(?:ctrl|control|cmd|command|alt|option|opt|shift|strg)"
        r"(?:\s*[+\-]\s*(?:ctrl|control|cmd|command|alt|option|opt|shift|strg))*"
        r"\s*[+\-]\s*(?:(?:f\d{1,2}|enter|return|tab|space|escape|esc|delete|del|backspace"
        r"|up|down|left|right|home|end|pgup|pgdn|[a-z0-9])(?![a-z0-9])|[/\\\[\],.;'])",
        re.IGNORECASE,
    ),
    # ⌘C, ⌘⇧V, ⌥⌘I
    re.compile(r"[⌘⌥⇧⌃]+\s*[A-Za-z0-9]?"),
    # Copy (C), Paste (V)
    re.compile(r"\(\s*[A-Za-z]\s*\)"),
    # Menu arrows and breadcrumb glyphs
    re.compile(r"[▸▹►▶▷❯⯈›»→⟶▾▼⌄]+"),
)

# ── Navigation stoplist (en / de / fr / es / nl / it / pt) ──────────
_NAV_WORDS: frozenset[str] = frozenset({
    # create
    "create", "new", "erstellen", "neu", "créer", "nouveau", "crear", "nuevo", "aanmaken", "nieuw", "crea", "nuovo", "criar", "novo",
    # open
    "open", "öffnen", "ouvrir", "abrir", "openen", "apri",
    # save
    "save", "speichern", "enregistrer", "guardar", "opslaan", "salva", "salvar",
    # share
    "share", "teilen", "partager", "compartir", "delen", "condividi", "compartilhar",
    # print
    "print", "drucken", "imprimer", "imprimir", "afdrukken", "stampa",
    # copy
    "copy", "kopieren", "copier", "copiar", "kopiëren", "copia",
    # cut
    "cut", "ausschneiden", "couper", "cortar", "knippen", "taglia",
    # paste
    "paste", "einfügen", "coller", "pegar", "plakken", "incolla", "colar",
    # select
    "select", "all", "auswählen", "alle", "sélectionner", "tout", "seleccionar", "todo", "selecteren", "seleziona", "tutto", "selecionar", "tudo",
    # settings
    "settings", "einstellungen", "paramètres", "réglages", "configuración", "ajustes", "instellingen", "impostazioni", "configurações",
    # help
    "help", "hilfe", "aide", "ayuda", "hulp", "aiuto", "ajuda",
    # search
    "search", "suchen", "suche", "rechercher", "recherche", "buscar", "búsqueda", "zoeken", "cerca", "pesquisar",
    # menu
    "menu", "menü", "menú",
    # file
    "file", "datei", "fichier", "archivo", "bestand", "arquivo",
    # edit
    "edit", "bearbeiten", "modifier", "editar", "bewerken", "modifica",
})

_TOKEN_STRIP = ".,:;!?|•·-–—_*#()[]{}\"'“”‘’…"
_DUPLICATE_KEY_RE = re.compile(r"[\W_]+", re.UNICODE)


class ContentNormalizer:
    """Pure, deterministic cleaner for raw document text."""

    def __init__(
        self,
        *,
        repeated_line_max_length: int = _REPEATED_LINE_MAX_LENGTH,
        repeated_line_min_occurrences: int = _REPEATED_LINE_MIN_OCCURRENCES,
    ):
        self._repeated_max_length = repeated_line_max_length
        self._repeated_min_occurrences = repeated_line_min_occurrences

    def normalize(
        self,
        raw_text: str,
        source_url: str,
        title: str | None = None,
        *,
        extracted_at: datetime | None = None,
    ) -> NormalizedDocument:
        """Clean ``raw_text`` and wrap it in a header block.

        Args:
            raw_text: Text as returned by an acquirer.
            source_url: Where the text came from (URL or file location).
            title: Optional heading for the header block.
            extracted_at: Extraction timestamp; part of the input so that
                repeated calls are reproducible. Defaults to now (UTC).
        """
        extracted_at = extracted_at or datetime.now(timezone.utc)

        text = self._collapse_whitespace(raw_text)
        text = self._strip_ui_chrome(text)
        lines = text.split("\n")
        lines = self._drop_repeated_short_lines(lines)
        lines = [line for line in lines if not self._is_navigation_line(line)]
        body = self._collapse_whitespace("\n".join(lines))

        content = self._build_header(title, source_url, extracted_at) + body
        document = NormalizedDocument(
            content=content,
            body=body,
            source_url=source_url,
            extracted_at=extracted_at,
            title=title,
            original_length=len(raw_text),
        )
        logger.info(
            "Normalized %s: %d → %d chars (compression %.1f%%)",
            source_url,
            document.original_length,
            len(body),
            document.compression_ratio * 100,
        )
        return document

    # ── Steps ────────────────────────────────────────────────────────

    @staticmethod
    def _collapse_whitespace(text: str) -> str:
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        text = _INLINE_WHITESPACE_RE.sub(" ", text)
        text = "\n".join(line.strip() for line in text.split("\n"))
        text = _MULTI_NEWLINE_RE.sub("\n\n", text)
        return text.strip()

    @staticmethod
    def _strip_ui_chrome(text: str) -> str:
        for pattern in _CHROME_PATTERNS:
            text = pattern.sub("", text)
        # Removing fragments can leave doubled spaces or dangling edges
        return "\n".join(_INLINE_WHITESPACE_RE.sub(" ", line).strip() for line in text.split("\n"))

    def _drop_repeated_short_lines(self, lines: list[str]) -> list[str]:
        """Remove every occurrence of a short line that appears more than twice.

        Lines longer than the threshold are always kept regardless of repetition.
        """
        keys = [self._duplicate_key(line) for line in lines]
        counts = Counter(
            key for line, key in zip(lines, keys)
            if key and len(line) <= self._repeated_max_length
        )
        kept: list[str] = []
        for line, key in zip(lines, keys):
            if (
                key
                and len(line) <= self._repeated_max_length
                and counts[key] >= self._repeated_min_occurrences
            ):
                continue
            kept.append(line)
        return kept

    @staticmethod
    def _duplicate_key(line: str) -> str:
        """Near-duplicate identity: case-, punctuation- and spacing-insensitive."""
        return _DUPLICATE_KEY_RE.sub(" ", line.casefold()).strip()

    @staticmethod
    def _is_navigation_line(line: str) -> bool:
        tokens = [t.strip(_TOKEN_STRIP).casefold() for t in line.split()]
        tokens = [t for t in tokens if t]
        if not tokens or len(tokens) > _NAV_LINE_MAX_TOKENS:
            return False
        return all(token in _NAV_WORDS for token in tokens)

    @staticmethod
    def _build_header(title: str | None, source_url: str, extracted_at: datetime) -> str:
        header_lines: list[str] = []
        if title and title.strip():
            header_lines.append(f"# {title.strip()}")
        header_lines.append(f"Source: {source_url}")
        header_lines.append(f"Extracted: {extracted_at.isoformat()}")
        return "\n".join(header_lines) + f"\n\n{HEADER_RULE}\n\n"
