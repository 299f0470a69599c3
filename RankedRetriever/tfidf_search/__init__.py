"""
TF-IDF search module for information retrieval using the TF-IDF weighting scheme.
Supports ranking documents by relevance to queries based on cosine similarity,
and refining queries with relevance feedback.
"""
