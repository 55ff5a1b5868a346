"""
AI Plugin Manifest Models

Pydantic models for the ``/.well-known/ai-plugin.json`` discovery document.
"""

from pydantic import BaseModel, Field


class PluginAuth(BaseModel):
    """Authentication scheme advertised to plugin hosts."""
    type: str = "none"


class PluginApi(BaseModel):
    """Location and format of the API description."""
    type: str = "openapi"
    url: str = ""


class PluginManifest(BaseModel):
    """AI plugin discovery manifest."""

    schema_version: str = "v1"
    name_for_model: str
    name_for_human: str
    description_for_model: str
    description_for_human: str
    auth: PluginAuth = Field(default_factory=PluginAuth)
    api: PluginApi = Field(default_factory=PluginApi)
    contact_email: str = ""
    logo_url: str = ""
    legal_info_url: str = ""
