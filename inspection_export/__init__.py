"""
Inspection Export

Document & archive assembly engine used by the inspection simulation to
produce downloadable artifacts:
- a paginated PDF report (styled text, ruled lines, numbered lists,
  header/footer retrofit across every page)
- zip bundles of auxiliary files (photos, logs, the report itself)

Run the HTTP host:
    uvicorn inspection_export.main:app --port 3004 --reload
"""
__version__ = "1.0.0"
