from abc import ABC, abstractmethod
from typing import Dict, Iterable, List

from .tokenizer import Token


class TokenPreprocessor(ABC):
    @abstractmethod
    def preprocess(self, token: Token, document: str) -> Token:
        raise NotImplementedError()

    def preprocess_all(self, tokens: List[Token], document: str) -> List[Token]:
        return [self.preprocess(token, document) for token in tokens]


class LocalisationPreprocessor(TokenPreprocessor):
    """Preprocessor converting British spellings to American spellings."""

    def __init__(self, localisation: Dict[str, str]):
        """
        Args:
            localisation: Mapping of British spelling to American spelling
        """
        self.localisation = localisation

    def preprocess(self, token: Token, document: str) -> Token:
        # Exact, case-sensitive lookup; runs before lowercasing
        american = self.localisation.get(token.processed_form)
        if american is not None:
            token.processed_form = american
        return token


class LowercasePreprocessor(TokenPreprocessor):
    def preprocess(self, token: Token, document: str) -> Token:
        token.processed_form = token.processed_form.lower()
        return token


class RemoveCommasPreprocessor(TokenPreprocessor):
    """Commas delimit fields in the index file, so a term may never contain one."""

    def preprocess(self, token: Token, document: str) -> Token:
        if "," in token.processed_form:
            token.processed_form = token.processed_form.replace(",", "")
        return token


class StopWordsPreprocessor(TokenPreprocessor):
    """Preprocessor for removing stop words."""

    def __init__(self, stop_words: Iterable[str]):
        """
        Initialize preprocessor for removing stop words.

        Args:
            stop_words: Words to remove, compared against the normalized form
        """
        self.stop_words = frozenset(stop_words)

    def preprocess(self, token: Token, document: str) -> Token:
        """
        If token is a stop word, replace its processed_form with empty string.

        Args:
            token: Token to process
            document: Original document

        Returns:
            Processed token
        """
        if token.processed_form in self.stop_words:
            token.processed_form = ""
        return token


class RemoveEmptyTokensPreprocessor(TokenPreprocessor):
    """Drops tokens whose processed form is empty."""

    def preprocess(self, token: Token, document: str) -> Token:
        return token

    def preprocess_all(self, tokens: List[Token], document: str) -> List[Token]:
        return [token for token in tokens if token.processed_form]


class PreprocessingPipeline:
    """Pipeline of token preprocessors."""

    def __init__(self, preprocessors, name="Default Pipeline"):
        """
        Initialize a preprocessing pipeline.

        Args:
            preprocessors: List of preprocessor objects, applied in order
            name: Name of the pipeline
        """
        self.preprocessors = preprocessors
        self.name = name

    def preprocess(self, tokens: List[Token], document: str) -> List[Token]:
        """
        Apply all preprocessors to the tokens.

        Args:
            tokens: List of tokens to preprocess
            document: Original document text

        Returns:
            List of preprocessed tokens
        """
        for preprocessor in self.preprocessors:
            tokens = preprocessor.preprocess_all(tokens, document)

        return tokens
