"""
Configuration management.
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Config:
    """
    Form configuration for document composition.

    Holds the constants printed on the paper forms: signatories, province,
    ordinance reference, page size and currency. Composition never reads
    the environment; callers use Config.load() and pass the result in.
    """

    # Signatories
    municipal_assessor: str = "MUNICIPAL ASSESSOR"
    recommending_assessor: str = "MUNICIPAL ASSESSOR"
    provincial_assessor: str = "PROVINCIAL ASSESSOR"

    # Locality
    province: str = "PROVINCE"
    ordinance_no: str = ""

    # Presentation
    currency: str = "PHP"
    page_size: str = "LEGAL"
    date_format: str = ""

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment."""
        defaults = cls()
        return cls(
            municipal_assessor=os.getenv("FAAS_MUNICIPAL_ASSESSOR", defaults.municipal_assessor),
            recommending_assessor=os.getenv(
                "FAAS_RECOMMENDING_ASSESSOR", defaults.recommending_assessor
            ),
            provincial_assessor=os.getenv("FAAS_PROVINCIAL_ASSESSOR", defaults.provincial_assessor),
            province=os.getenv("FAAS_PROVINCE", defaults.province),
            ordinance_no=os.getenv("FAAS_ORDINANCE_NO", defaults.ordinance_no),
            currency=os.getenv("FAAS_CURRENCY", defaults.currency),
            page_size=os.getenv("FAAS_PAGE_SIZE", defaults.page_size).upper(),
            date_format=os.getenv("FAAS_DATE_FORMAT", defaults.date_format),
        )

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "municipal_assessor": self.municipal_assessor,
            "recommending_assessor": self.recommending_assessor,
            "provincial_assessor": self.provincial_assessor,
            "province": self.province,
            "ordinance_no": self.ordinance_no,
            "currency": self.currency,
            "page_size": self.page_size,
            "date_format": self.date_format,
        }
