"""
English Exam Practice Engine

Adaptive IELTS, TOEFL and YDS practice served over HTTP:

1. Question selection that adapts difficulty to recent performance
2. Objective grading and AI-delegated scoring of written and spoken answers
3. Conversion of raw results onto each exam's reporting scale
4. Per-skill progress tracking with trends, weak areas and overall score estimates
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from englishtutor.common.logger import APP_LOGGER_NAME, app_logger, configure_logger

logger = app_logger.getChild("app")

__version__ = "0.1.0"


def build_scoring_oracle(config):
    """Scoring oracle selected by ``AI_PROVIDER``."""
    from englishtutor.ai import OpenAIScoringOracle, RubricScoringOracle

    if config.AI_PROVIDER == "openai":
        if not config.OPENAI_API_KEY:
            logger.warning("AI_PROVIDER is 'openai' but OPENAI_API_KEY is not set; using the rubric scorer")
            return RubricScoringOracle()
        return OpenAIScoringOracle(
            api_key=config.OPENAI_API_KEY,
            model=config.OPENAI_MODEL,
            api_base=config.OPENAI_API_BASE,
            max_tokens=config.OPENAI_MAX_TOKENS,
            timeout=config.AI_TIMEOUT_SECONDS,
        )
    return RubricScoringOracle()


def build_transcriber(config):
    """Speech transcriber, when an API key is configured."""
    from englishtutor.ai import GoogleSpeechTranscriber

    if not config.GOOGLE_SPEECH_API_KEY:
        return None
    return GoogleSpeechTranscriber(
        api_key=config.GOOGLE_SPEECH_API_KEY,
        api_base=config.GOOGLE_SPEECH_API_BASE,
        language_code=config.SPEECH_LANGUAGE,
        timeout=config.AI_TIMEOUT_SECONDS,
    )


def create_app(config=None, store=None, scoring_oracle=None, transcriber=None) -> FastAPI:
    """
    Create and configure a FastAPI application instance.

    Args:
        config: Settings (the application settings by default)
        store: Practice store; a SQL store on ``DATABASE_URL`` when omitted
        scoring_oracle: Scoring oracle; selected by ``AI_PROVIDER`` when omitted
        transcriber: Transcription oracle; Google Speech when a key is configured

    Returns:
        Configured FastAPI application
    """
    from fastapi.middleware.cors import CORSMiddleware

    from englishtutor.api import install_exception_handlers, main_router, register_module
    from englishtutor.config import settings
    from englishtutor.exams.router import router as practice_router

    config = config or settings
    configure_logger(APP_LOGGER_NAME, level=config.LOG_LEVEL, use_json=config.LOG_JSON, log_file=config.LOG_FILE)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        from englishtutor.database import SqlPracticeStore, close_database, get_session_factory, initialize_database
        from englishtutor.exams import ExamServiceRegistry, PracticeService

        logger.info("Application startup sequence initiated.")
        practice_store = store
        owns_database = practice_store is None
        if owns_database:
            await initialize_database(config.DATABASE_URL, echo=config.SQL_ECHO)
            practice_store = SqlPracticeStore(get_session_factory())

        oracle = scoring_oracle or build_scoring_oracle(config)
        speech = transcriber or build_transcriber(config)
        registry = ExamServiceRegistry(practice_store, oracle, speech, config=config)
        await registry.seed_catalog()

        app.state.store = practice_store
        app.state.registry = registry
        app.state.practice_service = PracticeService(registry, practice_store)
        logger.info(f"Serving exam types: {', '.join(registry.supported_exam_types())} "
                    f"(scoring: {oracle.name}, transcription: {speech.name if speech else 'disabled'})")

        yield

        logger.info("Application shutdown sequence initiated.")
        await oracle.close()
        if speech is not None:
            await speech.close()
        if owns_database:
            await close_database()
        logger.info("Application shutdown sequence complete.")

    app = FastAPI(
        title=config.PROJECT_NAME,
        description="Adaptive practice for IELTS, TOEFL and YDS",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_module("practice", practice_router, prefix="")
    app.include_router(main_router, prefix="/api")
    install_exception_handlers(app)

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "version": __version__}

    logger.info(f"Application created with {len(app.routes)} routes")
    return app
