"""
Core ingestion and classification algorithms.

- newick: Newick text to a Leaf/Internal tree
- records: metadata CSV to coerced Records
- classifier: numerical vs. categorical descriptor inference
- colors: bottom-up clade colouring
- views: data for the chart, heatmap and export panels
- dataset, session: one load's context and the reload orchestration
"""
