from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, model_validator
import yaml
import os

class ChunkingConfig(BaseModel):
    chunk_size: int = 1000          # words per fragment
    chunk_overlap: int = 200        # words shared by consecutive fragments

    @model_validator(mode="after")
    def _check_overlap(self):
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if not 0 <= self.chunk_overlap < self.chunk_size:
            raise ValueError("chunk_overlap must be in [0, chunk_size)")
        return self

    @property
    def stride(self) -> int:
        return self.chunk_size - self.chunk_overlap

class EmbeddingConfig(BaseModel):
    provider: str = "hashing"
    dimensions: int = 1536

class IndexConfig(BaseModel):
    backend: str = "memory"         # "memory" | "qdrant"
    qdrant_location: str = ":memory:"
    qdrant_path: str = ""
    collection_name: str = "document_chunks"

class RetrievalConfig(BaseModel):
    top_k: int = 5

class IngestionConfig(BaseModel):
    max_workers: int = 4

class StorageConfig(BaseModel):
    uploads_path: str = "./data/uploads"

class LLMConfig(BaseModel):
    provider: str = "openrouter"
    base_url: str = "https://openrouter.ai/api/v1"
    model: str = "google/gemini-2.5-flash"
    fallback_model: str = "mistralai/mistral-7b-instruct"
    max_tokens: int = 1024
    temperature: float = 0.1
    timeout_seconds: float = 60.0
    max_retries: int = 3
    retry_base_delay: float = 2.0

class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

class AppSettings(BaseSettings):
    chunking: ChunkingConfig = ChunkingConfig()
    embedding: EmbeddingConfig = EmbeddingConfig()
    index: IndexConfig = IndexConfig()
    retrieval: RetrievalConfig = RetrievalConfig()
    ingestion: IngestionConfig = IngestionConfig()
    storage: StorageConfig = StorageConfig()
    llm: LLMConfig = LLMConfig()
    logging: LoggingConfig = LoggingConfig()
    openrouter_api_key: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore"
    )

SECTIONS = {
    "chunking": ChunkingConfig,
    "embedding": EmbeddingConfig,
    "index": IndexConfig,
    "retrieval": RetrievalConfig,
    "ingestion": IngestionConfig,
    "storage": StorageConfig,
    "llm": LLMConfig,
    "logging": LoggingConfig,
}

def load_settings(config_path: str = "docchat/config/config.yaml") -> AppSettings:
    """Loads settings from config.yaml and applies env overrides."""

    # Try multiple paths for convenience during testing vs running
    paths_to_try = [
        config_path,
        "config.yaml",
        "config/config.yaml",
        os.path.join(os.path.dirname(__file__), "config.yaml")
    ]

    yaml_data = {}
    for path in paths_to_try:
        if os.path.exists(path):
            with open(path, "r", encoding="utf-8") as f:
                yaml_data = yaml.safe_load(f) or {}
            break

    # Only sections present in the yaml are passed explicitly, so env vars
    # still win for everything else.
    overrides = {
        name: section(**yaml_data[name])
        for name, section in SECTIONS.items()
        if yaml_data.get(name)
    }
    return AppSettings(**overrides)

# Global settings instance
settings = load_settings()
