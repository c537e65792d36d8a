# vetscreen/api/__init__.py
# ==========================
# API Layer — VetScreen
#
# Responsibility:
#   - Expose the registration, decision, interview capture, document,
#     background-check and assessment endpoints under /api/v1
#   - Map domain exceptions to HTTP status codes
#   - POST each new assessment to WEBHOOK_URL when configured
