"""
Porter stemming of tokens.

The stemmer is stateless between calls, so ``stem`` is safe to call from
several threads at once.
"""
from nltk.stem.porter import PorterStemmer

from .preprocess import TokenPreprocessor
from .tokenizer import Token

# Martin Porter's reference behaviour (tartarus.org), not NLTK's own extensions
_PORTER = PorterStemmer(mode=PorterStemmer.MARTIN_EXTENSIONS)


def stem(word: str) -> str:
    """
    Reduce a single word to its Porter stem.

    Args:
        word: Lowercase word

    Returns:
        The stem; words of two characters or fewer are returned unchanged
    """
    if not word:
        return word
    return _PORTER.stem(word)


class StemPreprocessor(TokenPreprocessor):
    """Preprocessor replacing each token with its Porter stem."""

    def preprocess(self, token: Token, document: str) -> Token:
        token.processed_form = stem(token.processed_form)
        return token
