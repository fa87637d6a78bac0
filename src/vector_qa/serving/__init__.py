"""
Serving — FastAPI application for the question-answering pipeline.

Run with ``uvicorn --factory vector_qa.serving.app:create_app``.
"""
