"""Range handling, catalog and data model - no HTTP framework imports here."""
