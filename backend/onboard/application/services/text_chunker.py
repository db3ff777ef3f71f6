"""Recursive character-boundary text splitter with overlapping windows."""

_DEFAULT_SEPARATORS = ("\n\n", "\n", ". ", " ", "")


class TextChunker:
    """Split text into windows of at most ``chunk_size`` characters.

    Splits on paragraph breaks first, then lines, sentences, words and
    finally single characters. Adjacent windows share up to
    ``chunk_overlap`` characters of context. Never yields an empty chunk.
    """

    def __init__(
        self,
        chunk_size: int = 1000,
        chunk_overlap: int = 150,
        separators: tuple[str, ...] = _DEFAULT_SEPARATORS,
    ):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if not 0 <= chunk_overlap < chunk_size:
            raise ValueError(
                f"chunk_overlap ({chunk_overlap}) must be >= 0 and smaller than chunk_size ({chunk_size})"
            )
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self._separators = separators

    def split(self, text: str) -> list[str]:
        text = text.strip()
        if not text:
            return []
        if len(text) <= self.chunk_size:
            return [text]
        return [c for c in self._split_recursive(text, list(self._separators)) if c.strip()]

    def _split_recursive(self, text: str, separators: list[str]) -> list[str]:
        """Split with the first separator present, recursing into oversized pieces."""
        separator = separators[-1]
        remaining: list[str] = []
        for i, candidate in enumerate(separators):
            if candidate == "":
                separator = ""
                break
            if candidate in text:
                separator = candidate
                remaining = separators[i + 1:]
                break

        pieces = text.split(separator) if separator else list(text)

        chunks: list[str] = []
        fitting: list[str] = []
        for piece in pieces:
            if len(piece) <= self.chunk_size:
                fitting.append(piece)
                continue
            if fitting:
                chunks.extend(self._merge(fitting, separator))
                fitting = []
            if remaining:
                chunks.extend(self._split_recursive(piece, remaining))
            else:
                chunks.append(piece)
        if fitting:
            chunks.extend(self._merge(fitting, separator))
        return chunks

    def _merge(self, pieces: list[str], separator: str) -> list[str]:
        """Greedily pack pieces into windows, carrying a tail of up to ``chunk_overlap`` chars."""
        sep_len = len(separator)
        windows: list[str] = []
        current: list[str] = []
        total = 0

        for piece in pieces:
            joined_len = total + len(piece) + (sep_len if current else 0)
            if joined_len > self.chunk_size and current:
                window = separator.join(current).strip()
                if window:
                    windows.append(window)
                # Drop from the front until the carried tail fits the overlap
                # and leaves room for the incoming piece.
                while current and (
                    total > self.chunk_overlap
                    or total + len(piece) + (sep_len if current else 0) > self.chunk_size
                ):
                    total -= len(current[0]) + (sep_len if len(current) > 1 else 0)
                    current.pop(0)
            current.append(piece)
            total += len(piece) + (sep_len if len(current) > 1 else 0)

        window = separator.join(current).strip()
        if window:
            windows.append(window)
        return windows
