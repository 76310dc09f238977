from dotenv import load_dotenv
load_dotenv()

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.filter_router import router as filter_router
from api.graph_router import router as graph_router
from api.schema_router import router as schema_router
from api.search_router import router as search_router
from core.config import Settings, settings as default_settings
from core.database import GraphDBInterface, Neo4jDatabase
from core.errors import ArgumentError, SchemaParseError, SearchUnavailableError
from core.filter_model import FilterService
from core.graph_service import GraphService
from core.logger import get_logger
from core.schema_service import SchemaService
from search.index_builder import SearchIndexBuilder
from search.service import SearchService

logger = get_logger(__name__)


def create_app(data_source: Optional[GraphDBInterface] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Creates the API and wires every service to the given data source.
    Without a data source, a Neo4j connection is configured from the settings.
    """
    settings = settings or default_settings
    if data_source is None:
        data_source = Neo4jDatabase(
            uri=settings.NEO4J_URI,
            user=settings.NEO4J_USERNAME,
            password=settings.NEO4J_PASSWORD,
            database=settings.NEO4J_DATABASE,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Graph explorer API started.")
        yield
        await data_source.close()
        logger.info("Graph explorer API stopped.")

    app = FastAPI(
        title="Graph Explorer API",
        description="Nodes, edges, schema, filter models and full-text search over a graph database.",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.graph_service = GraphService(
        data_source, node_limit=settings.QUERY_NODE_LIMIT, edge_limit=settings.QUERY_EDGE_LIMIT
    )
    app.state.filter_service = FilterService(data_source, sample_size=settings.FILTER_SAMPLE_SIZE)
    app.state.schema_service = SchemaService(data_source)
    app.state.search_service = SearchService(
        SearchIndexBuilder(
            data_source,
            heap_size=settings.SEARCH_INDEX_HEAP_SIZE,
            combine_with=settings.SEARCH_COMBINE_WITH,
        )
    )

    if settings.CORS_URL:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[settings.CORS_URL],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        logger.info(f"CORS enabled for {settings.CORS_URL}")
    else:
        logger.info("CORS not enabled")

    @app.exception_handler(ArgumentError)
    async def argument_error_handler(request: Request, exc: ArgumentError):
        logger.info(f"Rejected {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(SchemaParseError)
    async def schema_parse_error_handler(request: Request, exc: SchemaParseError):
        logger.error(f"Unexpected schema data on {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.exception_handler(SearchUnavailableError)
    async def search_unavailable_handler(request: Request, exc: SearchUnavailableError):
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    # --- Include all the Routers ---
    app.include_router(graph_router)
    app.include_router(filter_router)
    app.include_router(schema_router)
    app.include_router(search_router)

    @app.get("/")
    def read_root():
        return {"message": "Graph Explorer API is running."}

    return app
