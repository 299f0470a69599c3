import re
from abc import ABC, abstractmethod
from enum import Enum
from typing import Iterator, List, Optional


class TokenType(Enum):
    URL = "url"
    DOMAIN = "domain"
    EMAIL = "email"
    IP = "ip"
    PHRASE = "phrase"
    QUOTED = "quoted"
    WORD = "word"


class Token:
    """
    A single token found in a text.

    ``processed_form`` starts as the matched text and is what the
    preprocessors change. A preprocessor removes a token by setting it to
    the empty string.
    """

    def __init__(self, processed_form: str, position: int, token_type: TokenType):
        self.processed_form = processed_form
        self.position = position
        self.token_type = token_type

    def __repr__(self):
        return f"Token({self.processed_form!r}, {self.position}, {self.token_type.name})"


# Characters stripped from both ends of every token
STRIP_CHARACTERS = ".,'\"_[]"


class TokenMatcher:
    """One tokenization rule: a pattern tried at a given position in the text."""

    def __init__(self, token_type: TokenType, pattern: str, group: int = 0):
        self.token_type = token_type
        self.pattern = re.compile(pattern)
        self.group = group

    def match(self, text: str, pos: int) -> Optional[re.Match]:
        return self.pattern.match(text, pos)

    def extract(self, match: re.Match) -> str:
        return match.group(self.group)


_IP_OCTET = r"(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)"
_EMAIL_ATOM = r"[a-z0-9!#$%&'*+/=?^_`{|}~-]+"
_EMAIL_LABEL = r"[a-z0-9](?:[a-z0-9-]*[a-z0-9])?"

URL_MATCHER = TokenMatcher(TokenType.URL, r"https?://\S+")
DOMAIN_MATCHER = TokenMatcher(TokenType.DOMAIN, r"(?:www)?\S+\.\S+")
EMAIL_MATCHER = TokenMatcher(
    TokenType.EMAIL,
    rf"{_EMAIL_ATOM}(?:\.{_EMAIL_ATOM})*@"
    rf"(?:(?:{_EMAIL_LABEL}\.)+{_EMAIL_LABEL}|\[(?:{_IP_OCTET}\.){{3}}{_IP_OCTET}\])",
)
IP_MATCHER = TokenMatcher(TokenType.IP, rf"(?:{_IP_OCTET}\.){{3}}{_IP_OCTET}")
PHRASE_MATCHER = TokenMatcher(TokenType.PHRASE, r"[A-Z][a-zA-Z0-9-]*(?:\s[A-Z][a-zA-Z0-9-]*)+")
QUOTED_MATCHER = TokenMatcher(TokenType.QUOTED, r"(?<!\S)'([^']*?)'(?!\S)", group=1)
WORD_MATCHER = TokenMatcher(TokenType.WORD, r"[^\s{.,:;”’()?!}]+")

# Priority order: the first matcher that matches at a position wins
DEFAULT_MATCHERS = [
    URL_MATCHER,
    DOMAIN_MATCHER,
    EMAIL_MATCHER,
    IP_MATCHER,
    PHRASE_MATCHER,
    QUOTED_MATCHER,
    WORD_MATCHER,
]


def clean_token(token: str) -> str:
    """Trim whitespace, then strip ``STRIP_CHARACTERS`` from both ends."""
    return token.strip().strip(STRIP_CHARACTERS)


def join_lines(lines: List[str]) -> str:
    """
    Join the lines of a document into one string.

    A line ending with a hyphen continues a hyphenated word: the hyphen is
    dropped and no space is added. Every other line break becomes a space.
    """
    parts = []
    for line in lines:
        if line.endswith("-"):
            parts.append(line[:-1])
        else:
            parts.append(line + " ")
    return "".join(parts)


class Tokenizer(ABC):
    @abstractmethod
    def tokenize(self, document: str) -> List[Token]:
        raise NotImplementedError()


class RegexMatchTokenizer(Tokenizer):
    """
    Tokenizer that scans the text once, trying an ordered list of matchers at
    every position. Positions where no matcher applies (whitespace and the
    separator characters) are skipped.
    """

    def __init__(self, matchers: List[TokenMatcher] = None):
        self.matchers = matchers or DEFAULT_MATCHERS

    def _scan(self, document: str) -> Iterator[Token]:
        pos = 0
        length = len(document)
        while pos < length:
            if document[pos].isspace():
                pos += 1
                continue

            for matcher in self.matchers:
                match = matcher.match(document, pos)
                if match and match.end() > pos:
                    yield Token(clean_token(matcher.extract(match)), pos, matcher.token_type)
                    pos = match.end()
                    break
            else:
                pos += 1

    def tokenize(self, document: str) -> List[Token]:
        return list(self._scan(document))
