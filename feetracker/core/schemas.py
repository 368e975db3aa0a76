from decimal import Decimal
from typing import Annotated

from pydantic import Field, StringConstraints

# Directory forms only check that text fields are not blank.
NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

Amount = Annotated[Decimal, Field(ge=0, max_digits=12, decimal_places=2)]
