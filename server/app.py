import sys
import logging
from datetime import datetime, timezone

from flask import Flask, request, jsonify, render_template
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from legal_qa.config import Settings
from legal_qa.errors import CorpusError
from legal_qa.llm import NO_ANSWER_MESSAGE, create_llm_client
from legal_qa.retrieval import Retriever

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def error_response(status: int, error: str, message: str):
    return jsonify({"error": error, "message": message}), status


# --------------------------------------------------
# APP FACTORY
# --------------------------------------------------
def create_app(settings=None, llm_client=None, retriever=None) -> Flask:
    """Build the Flask app: load the corpus, build the index, wire the LLM"""
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    app = Flask(__name__, template_folder="templates")
    CORS(app, origins=settings.cors_origins)

    logger.info("Initializing RAG Legal QA System...")
    if retriever is None:
        # Raises CorpusError when the folder is missing or empty
        retriever = Retriever.from_directory(settings.documents_dir)
    logger.info("System ready with %d legal documents", retriever.document_count)

    if llm_client is None:
        llm_client = create_llm_client(settings)
    if not llm_client.is_configured:
        logger.error(
            "LLM not configured properly. Set either OPENAI_API_KEY or GROQ_API_KEY"
        )

    # --------------------------------------------------
    # API ROUTES
    # --------------------------------------------------
    @app.route("/", methods=["GET"])
    def index():
        return render_template("index.html")

    @app.route("/api/health", methods=["GET"])
    def health_check():
        timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        return jsonify({
            "status": "ok",
            "llmConfigured": llm_client.is_configured,
            "timestamp": timestamp.replace("+00:00", "Z")
        })

    @app.route("/api/ask", methods=["POST"])
    def api_ask():
        payload = request.get_json(silent=True)
        question = payload.get("question") if isinstance(payload, dict) else None

        if not isinstance(question, str) or not question.strip():
            return error_response(
                400, "Invalid request",
                "Question is required and must be a non-empty string"
            )

        if not llm_client.is_configured:
            return error_response(
                503, "Service unavailable",
                "LLM is not configured. Please set API keys in .env file."
            )

        logger.info("Received question: %r", question)

        try:
            # Step 1: rank the corpus with TF-IDF
            retrieved = retriever.retrieve(question, top_k=settings.top_k)

            if not retrieved or retrieved[0]["score"] == 0:
                return jsonify({"answer": NO_ANSWER_MESSAGE, "sources": []})

            # Step 2: let the LLM answer from the retrieved context
            answer = llm_client.generate_answer(retrieved, question)
        except Exception as e:
            logger.exception("Error processing request")
            return error_response(500, "Internal server error", str(e))

        logger.info("Response sent successfully")
        return jsonify({
            "answer": answer,
            "sources": [
                {"text": d["text"], "filename": d["filename"], "score": d["score"]}
                for d in retrieved
            ]
        })

    # --------------------------------------------------
    # ERROR HANDLERS
    # --------------------------------------------------
    @app.errorhandler(404)
    def not_found(e):
        return error_response(
            404, "Not found", f"Route {request.method} {request.path} not found"
        )

    @app.errorhandler(HTTPException)
    def http_error(e):
        return error_response(e.code, e.name, e.description)

    @app.errorhandler(Exception)
    def unhandled_error(e):
        logger.exception("Unhandled error")
        return error_response(500, "Internal server error", str(e))

    return app


# --------------------------------------------------
# ENTRY POINT
# --------------------------------------------------
def main() -> int:
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    try:
        app = create_app(settings)
    except CorpusError as e:
        logger.error("Failed to initialize retrieval system: %s", e)
        return 1

    logger.info("Server running on http://localhost:%d", settings.port)
    logger.info("API endpoint: http://localhost:%d/api/ask", settings.port)
    logger.info("Health check: http://localhost:%d/api/health", settings.port)
    app.run(host="0.0.0.0", port=settings.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
