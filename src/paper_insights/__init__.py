"""Chunking and citation-grounded AI summaries for academic papers."""

from paper_insights.ingest.chunking import chunk_document
from paper_insights.summary.resolver import generate_document_summary

__all__ = ["chunk_document", "generate_document_summary"]
