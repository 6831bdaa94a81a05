"""
app.schemas
~~~~~~~~~~~
Pydantic schemas and models for the API.
"""
from app.schemas.api_response import ApiResponse
from app.schemas.assistant import AskRequest, AskResponseData
from app.schemas.chat import ChatMessageIn, CodeSnippet, FileAttachment, UserProfile
from app.schemas.content import ApiCreate, ApiTestResult, ProjectCreate, UploadData
from app.schemas.stats import DashboardData, StatsData
from app.schemas.users import AuthData, LoginRequest, RegisterRequest

# Call model_rebuild to resolve forward references in generic Pydantic models.
ApiResponse.model_rebuild()
