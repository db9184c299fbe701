from pydantic import BaseModel

PAGE_LENGTH = 10


class ProjectionOptions(BaseModel):
    """Fields to leave out of a projected transaction."""
    omit_script_sig: bool = False
    omit_asm: bool = False
    omit_spent_info: bool = False
