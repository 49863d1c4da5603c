import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

import numpy as np
import pandas as pd
from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.metrics.pairwise import cosine_similarity

from .errors import CorpusError

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 3


def load_documents(path: Union[str, Path]) -> pd.DataFrame:
    """Load every .txt file in the folder into a (filename, text) DataFrame"""
    documents_path = Path(path)
    if not documents_path.is_dir():
        raise CorpusError(f"Documents folder not found: {documents_path}")

    files = sorted(
        p for p in documents_path.iterdir()
        if p.is_file() and p.suffix == ".txt"
    )
    if not files:
        raise CorpusError(f"No .txt documents found in {documents_path}")

    # Undecodable bytes become U+FFFD instead of aborting startup
    rows = [
        {"filename": p.name, "text": p.read_text(encoding="utf-8", errors="replace")}
        for p in files
    ]

    logger.info("Loaded %d documents from %s", len(rows), documents_path)
    return pd.DataFrame(rows, columns=["filename", "text"])


def build_index(corpus_df: pd.DataFrame):
    """Fit a TF-IDF vectorizer on the corpus and return it with the document matrix"""
    if corpus_df is None or corpus_df.empty:
        raise CorpusError("Cannot build an index over an empty corpus")

    vectorizer = TfidfVectorizer(lowercase=True, stop_words="english")
    try:
        tfidf_matrix = vectorizer.fit_transform(corpus_df["text"].fillna("").tolist())
    except ValueError as e:
        # sklearn raises ValueError on an empty vocabulary
        raise CorpusError(f"Corpus has no indexable terms: {e}") from e

    return vectorizer, tfidf_matrix


def cosine_similarity_scores(query_vec, tfidf_matrix) -> np.ndarray:
    """Cosine similarity of one query vector against every document row.

    Zero vectors (no known terms) score 0 against everything.
    """
    return cosine_similarity(query_vec, tfidf_matrix)[0]


def retrieve_documents(vectorizer, tfidf_matrix, corpus_df, question, top_k=DEFAULT_TOP_K):
    """
    Retrieve the top k most similar documents for a question.

    Args:
        vectorizer: TF-IDF vectorizer fitted on the corpus
        tfidf_matrix: Pre-computed TF-IDF matrix of the corpus texts
        corpus_df: DataFrame with filename and text columns
        question: User's question string
        top_k: Maximum number of documents to return

    Returns:
        List of dictionaries with text, filename and similarity score,
        sorted by descending score
    """
    if vectorizer is None or tfidf_matrix is None or corpus_df is None or corpus_df.empty:
        raise CorpusError("Documents not loaded. Call load_documents() first.")

    if top_k <= 0:
        return []

    # Transform the question using the same vectorizer
    q_vec = vectorizer.transform([question])
    sims = cosine_similarity_scores(q_vec, tfidf_matrix)

    # Stable sort keeps filename order between equal scores
    top_idx = np.argsort(-sims, kind="stable")[:top_k]

    results = []
    for i in top_idx:
        results.append({
            "text": corpus_df.iloc[i]["text"],
            "filename": corpus_df.iloc[i]["filename"],
            "score": min(max(float(sims[i]), 0.0), 1.0)
        })

    logger.info("Retrieved %d documents for query: %r", len(results), question)
    for rank, doc in enumerate(results, start=1):
        logger.info("  %d. %s (score: %.4f)", rank, doc["filename"], doc["score"])

    return results


class Retriever:
    """Static corpus plus its TF-IDF index, built once at startup"""

    def __init__(self, corpus_df: pd.DataFrame):
        self.corpus = corpus_df
        self.vectorizer, self.tfidf_matrix = build_index(corpus_df)

    @classmethod
    def from_directory(cls, path: Union[str, Path]) -> "Retriever":
        return cls(load_documents(path))

    @property
    def document_count(self) -> int:
        return len(self.corpus)

    def retrieve(self, question: str, top_k: Optional[int] = None) -> List[Dict]:
        return retrieve_documents(
            self.vectorizer,
            self.tfidf_matrix,
            self.corpus,
            question,
            top_k=DEFAULT_TOP_K if top_k is None else top_k,
        )
