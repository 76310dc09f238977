from fastapi import Request

from core.filter_model import FilterService
from core.graph_service import GraphService
from core.schema_service import SchemaService
from search.service import SearchService

# The services are created once by create_app and kept on app.state.

def get_graph_service(request: Request) -> GraphService:
    return request.app.state.graph_service

def get_filter_service(request: Request) -> FilterService:
    return request.app.state.filter_service

def get_schema_service(request: Request) -> SchemaService:
    return request.app.state.schema_service

def get_search_service(request: Request) -> SearchService:
    return request.app.state.search_service
