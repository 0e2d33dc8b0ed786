"""Document formats the generator reads and writes."""
