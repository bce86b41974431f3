"""External systems: WordPress REST fetcher and Figma clipboard conversion."""
