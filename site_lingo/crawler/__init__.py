"""site_lingo.crawler: page fetching, link discovery and the bounded site crawl."""
