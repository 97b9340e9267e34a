from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    LISTING_DEFAULT_PER_PAGE: int = 15
    LISTING_SORT_SEPARATOR: str = "|"

    # Query parameter names sent by the front-end grid
    LISTING_SORT_PARAM: str = "sort"
    LISTING_FILTER_PARAM: str = "filter"
    LISTING_SEARCHABLE_PARAM: str = "searchable"
    LISTING_PER_PAGE_PARAM: str = "per_page"
    LISTING_PAGE_PARAM: str = "page"


settings = Settings()
