from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base model for all docversions data objects."""

    model_config = ConfigDict(populate_by_name=True)
