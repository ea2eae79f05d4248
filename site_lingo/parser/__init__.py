"""site_lingo.parser: HTML parsing and fragment extraction."""
