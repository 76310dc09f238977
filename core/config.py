from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
    """
    Centralized application settings. Pydantic's BaseSettings will automatically
    load these from environment variables or a .env file.
    """
    # --- Neo4j Database Credentials ---
    NEO4J_URI: str = Field("bolt://localhost:7687", description="Bolt URI of the graph database.")
    NEO4J_USERNAME: str = Field("neo4j", description="Username for the graph database.")
    NEO4J_PASSWORD: str = Field("", description="Password for the graph database.")
    NEO4J_DATABASE: Optional[str] = Field(None, description="Database name, or the server default when unset.")

    # --- Logging ---
    LOG_LEVEL: str = Field("INFO", description="Level of the JSON loggers.")

    # --- HTTP ---
    CORS_URL: Optional[str] = Field(None, description="Origin allowed by CORS. CORS stays disabled when unset.")

    # --- Query Parameters ---
    QUERY_NODE_LIMIT: int = Field(250, description="Maximum number of nodes returned by queryAll when no limit is given.")
    QUERY_EDGE_LIMIT: int = Field(1000, description="Maximum number of edges returned by queryAll when no limit is given.")
    FILTER_SAMPLE_SIZE: int = Field(1000, description="Number of entities sampled per type to build a filter model.")

    # --- Full-Text Search ---
    SEARCH_COMBINE_WITH: Literal["AND", "OR"] = Field("AND", description="How the words of a search query are combined.")
    SEARCH_INDEX_HEAP_SIZE: int = Field(50_000_000, description="Memory budget of the search index writer in bytes.")

    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

settings = Settings()
