from openai_image_mcp.cli import app

app()
