"""
API Request/Response Schemas using Pydantic.

Structure of HTTP requests and responses for the Flowpad API.
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime

# Auth schemas
class GoogleAuthRequest(BaseModel):
    idToken: str = Field("", description="Google ID token from the sign-in button")

class UserSummary(BaseModel):
    id: int = Field(..., description="User ID")
    email: str = Field(..., description="Account email")
    name: str = Field(..., description="Display name")

class AuthResponse(BaseModel):
    token: str = Field(..., description="Session JWT, also set as a cookie")
    user: UserSummary

# Graph schemas
class GraphCreate(BaseModel):
    title: Optional[str] = Field(None, description="Graph title, defaults to 'Untitled'", max_length=255)
    data: Optional[Dict[str, Any]] = Field(None, description="Graph document with tiles and connections")

class GraphUpdate(BaseModel):
    title: Optional[str] = Field(None, description="New title; omitted keeps the current one", max_length=255)
    data: Optional[Dict[str, Any]] = Field(None, description="Replacement document; omitted keeps the current one")

class GraphResponse(BaseModel):
    id: int = Field(..., description="Graph ID")
    user_id: int = Field(..., description="Owner user ID")
    title: str = Field(..., description="Graph title")
    data: Dict[str, Any] = Field(..., description="Graph document")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    dirty: bool = Field(False, description="True when the cached copy has unsaved realtime changes")

class SharedGraphResponse(GraphResponse):
    owner_name: str = Field(..., description="Name of the graph owner")
    permission: str = Field(..., description="Caller's permission: viewer or editor")

class GraphListResponse(BaseModel):
    own: List[GraphResponse]
    shared: List[SharedGraphResponse]

# Share schemas
class ShareCreate(BaseModel):
    email: str = Field(..., description="Invitee email address")
    permission: str = Field("viewer", description="viewer or editor")

class ShareUpdate(BaseModel):
    permission: str = Field(..., description="viewer or editor")

class ShareResponse(BaseModel):
    graph_id: int
    email: str
    permission: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

# Realtime schemas
class RealtimeUpdate(BaseModel):
    type: Any = Field(None, description="tile_create, tile_update, tile_move, tile_delete, connection_create or connection_delete")
    data: Any = Field(default_factory=dict, description="Op payload; shape checked per op type")

class RealtimeBatch(BaseModel):
    updates: List[RealtimeUpdate] = Field(default_factory=list, description="Ops, applied in order")

class RealtimeResponse(BaseModel):
    success: bool = True
    applied: int = Field(..., description="Ops that changed the document")
    skipped: int = Field(..., description="Ops that referenced unknown or duplicate ids")
    lastModified: str

class SaveResponse(BaseModel):
    success: bool = True
    saved: bool = Field(..., description="False when there were no unsaved changes")
    lastModified: Optional[str] = None

class MessageResponse(BaseModel):
    message: str
