"""Step lists for the prokaryote, virus and eukaryote modules."""
