from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Certificate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    name: str
    subject_title: str = "-"
    date: str = "-"
    expired_date: str = "-"
    status: str = "VALID"
    certificate_link: str = "#"
    # column | heuristic | table | none
    derived_from: str = "none"


class SearchResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    search_term: str
    name: str | None = None
    results: list[Certificate]
    count: int
