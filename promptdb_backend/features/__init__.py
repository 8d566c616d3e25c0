"""Feature packages: metadata extraction (bytes -> text) and geninfo parsing (text -> record)."""
