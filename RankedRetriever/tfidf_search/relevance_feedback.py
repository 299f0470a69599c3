"""
Rocchio-style relevance feedback.

The user judges the documents shown for a query; the query vector is then
moved towards the centroids of the judged documents and the collection is
ranked again. Both centroids are added to the query:

    new_query = query + relevant_weight * relevant_centroid
                      + non_relevant_weight * non_relevant_centroid
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, List

from .tfidf_search import SearchResults, TFIDFSearchEngine

logger = logging.getLogger(__name__)

RELEVANT_WEIGHT = 0.5
NON_RELEVANT_WEIGHT = 0.25


def compute_centroid(vectors: List[List[float]], size: int) -> List[float]:
    """
    Coordinate-wise mean of ``vectors``.

    Args:
        vectors: Vectors of length ``size``
        size: Vector length, used when ``vectors`` is empty

    Returns:
        The centroid, or a zero vector if there are no vectors
    """
    if not vectors:
        return [0.0] * size

    centroid = [0.0] * size
    for vector in vectors:
        for i, weight in enumerate(vector):
            centroid[i] += weight
    return [total / len(vectors) for total in centroid]


def perform_relevance_feedback(result_vectors: Dict[str, List[float]], judgments: Dict[str, bool],
                               query_vector: List[float], relevant_weight: float = RELEVANT_WEIGHT,
                               non_relevant_weight: float = NON_RELEVANT_WEIGHT) -> List[float]:
    """
    Compute a new query vector from relevance judgments.

    Args:
        result_vectors: Vectors of the documents shown, by document name
        judgments: True for each document judged relevant, False otherwise
        query_vector: Current query vector
        relevant_weight: Weight of the relevant centroid
        non_relevant_weight: Weight of the non-relevant centroid

    Returns:
        The adjusted query vector
    """
    relevant = [vector for name, vector in result_vectors.items() if judgments.get(name)]
    non_relevant = [vector for name, vector in result_vectors.items() if not judgments.get(name)]

    size = len(query_vector)
    relevant_centroid = compute_centroid(relevant, size)
    non_relevant_centroid = compute_centroid(non_relevant, size)

    return [q + relevant_weight * r + non_relevant_weight * n
            for q, r, n in zip(query_vector, relevant_centroid, non_relevant_centroid)]


class FeedbackPrompt(ABC):
    """The user-facing side of the feedback loop."""

    @abstractmethod
    def show_results(self, results: SearchResults) -> None:
        raise NotImplementedError()

    @abstractmethod
    def wants_feedback(self) -> bool:
        raise NotImplementedError()

    @abstractmethod
    def is_relevant(self, document: str) -> bool:
        raise NotImplementedError()


def run_feedback_loop(engine: TFIDFSearchEngine, query_vector: List[float], top_k: int,
                      prompt: FeedbackPrompt, relevant_weight: float = RELEVANT_WEIGHT,
                      non_relevant_weight: float = NON_RELEVANT_WEIGHT) -> List[float]:
    """
    Rank, show the results, and refine the query until the user stops.

    The loop ends when a ranking returns no results or the user declines
    to give feedback.

    Args:
        engine: Search engine holding the document vectors
        query_vector: Initial query vector
        top_k: Number of results per round
        prompt: Shows results and collects judgments

    Returns:
        The final query vector
    """
    rounds = 0
    while True:
        results = engine.rank(query_vector, top_k)
        prompt.show_results(results)

        if results.is_empty or not prompt.wants_feedback():
            break

        judgments = {name: prompt.is_relevant(name) for name in results.names}
        result_vectors = {name: engine.vectors[name] for name in results.names}
        query_vector = perform_relevance_feedback(result_vectors, judgments, query_vector,
                                                  relevant_weight, non_relevant_weight)
        rounds += 1
        logger.debug("Feedback round %d: %d of %d judged relevant",
                     rounds, sum(judgments.values()), len(judgments))

    return query_vector
