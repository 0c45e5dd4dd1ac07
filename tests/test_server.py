import asyncio
import json

import httpx

from openai_image_mcp.server import client_lifespan, create_server

from conftest import PNG_BYTES, FakeProvider, RecordingHandler, make_client


def _tools(server):
    return {tool.name: tool for tool in asyncio.run(server.list_tools())}


def _call(server, name, arguments):
    result = asyncio.run(server.call_tool(name, arguments))
    # Newer releases also return the structured output alongside the content.
    if isinstance(result, tuple):
        result = result[0]
    (content,) = result
    return content.text


def test_registers_three_tools(settings, api_client):
    tools = _tools(create_server(settings, api_client=api_client))
    assert set(tools) == {"create_image", "generate_image", "edit_image"}
    assert tools["create_image"].description == "Creates an image given a prompt."


def test_tool_parameters_are_described_with_defaults(settings, api_client):
    tools = _tools(create_server(settings, api_client=api_client))

    create = tools["create_image"].inputSchema
    assert set(create["required"]) == {"prompt", "output_path"}
    assert create["properties"]["model"]["default"] == "dall-e-3"
    assert create["properties"]["style"]["default"] == "vivid"
    assert "absolute" in create["properties"]["output_path"]["description"]

    generate = tools["generate_image"].inputSchema
    assert set(generate["properties"]) == {
        "prompt",
        "output_path",
        "background",
        "moderation",
        "output_compression",
        "output_format",
        "quality",
        "size",
    }
    assert generate["properties"]["output_compression"]["default"] == 100

    edit = tools["edit_image"].inputSchema
    assert set(edit["required"]) == {"prompt", "input_path", "output_path"}
    assert edit["properties"]["mask_path"]["default"] == ""


def test_generate_image_tool(tmp_path, settings, api_client, handler):
    server = create_server(settings, api_client=api_client, provider=FakeProvider())
    out = tmp_path / "fox.jpg"

    text = _call(
        server,
        "generate_image",
        {
            "prompt": "a red fox",
            "output_path": str(out),
            "output_format": "jpeg",
            "output_compression": "40",
            "quality": "high",
        },
    )

    assert text == f"Image is generated to {out}"
    (body,) = handler.json_bodies()
    assert body["model"] == "gpt-image-1"
    assert body["output_format"] == "jpeg"
    assert body["output_compression"] == 40
    assert body["quality"] == "high"
    assert body["size"] == "auto"
    assert out.read_bytes() == PNG_BYTES


def test_edit_image_tool(tmp_path, settings, api_client, handler):
    server = create_server(settings, api_client=api_client, provider=FakeProvider())
    image = tmp_path / "input.png"
    image.write_bytes(b"input-bytes")
    out = tmp_path / "edited.png"

    text = _call(
        server,
        "edit_image",
        {
            "prompt": "add a hat",
            "input_path": str(image),
            "output_path": str(out),
            "size": "1024x1536",
        },
    )

    assert text == f"Image is edited to {out}"
    (request,) = handler.requests
    assert request.url.path == "/v1/images/edits"
    body = request.content
    names = [b"image", b"prompt", b"model", b"quality", b"size"]
    offsets = [body.index(b'name="' + name + b'"') for name in names]
    assert offsets == sorted(offsets)
    assert b'name="mask"' not in body
    assert b"1024x1536" in body
    assert out.read_bytes() == PNG_BYTES


def test_create_image_tool(tmp_path, settings, api_client, handler):
    provider = FakeProvider()
    server = create_server(settings, api_client=api_client, provider=provider)
    out = tmp_path / "lighthouse.png"

    text = _call(
        server,
        "create_image",
        {
            "prompt": "a lighthouse",
            "output_path": str(out),
            "quality": "hd",
            "size": "1792x1024",
            "style": "natural",
        },
    )

    assert text == f"Image is generated to {out}"
    ((prompt, model, options),) = provider.calls
    assert (prompt, model) == ("a lighthouse", "dall-e-3")
    assert (options.quality, options.size, options.style) == (
        "hd",
        "1792x1024",
        "natural",
    )
    assert out.read_bytes() == b"legacy-bytes"
    assert handler.requests == []


def test_invalid_values_never_leave_the_server(tmp_path, settings, api_client, handler):
    provider = FakeProvider()
    server = create_server(settings, api_client=api_client, provider=provider)
    image = tmp_path / "input.png"
    image.write_bytes(b"input-bytes")
    out = str(tmp_path / "out.png")

    calls = [
        ("create_image", {"prompt": "p", "output_path": out, "quality": "ultra"}),
        ("generate_image", {"prompt": "p", "output_path": out, "quality": "ultra"}),
        (
            "edit_image",
            {
                "prompt": "p",
                "input_path": str(image),
                "output_path": out,
                "quality": "ultra",
            },
        ),
    ]
    for name, arguments in calls:
        text = _call(server, name, arguments)
        assert text == "An error occurred: Invalid argument 'quality': 'ultra'"

    assert handler.requests == []
    assert provider.calls == []
    assert not (tmp_path / "out.png").exists()


def test_generate_image_tool_reports_api_errors(tmp_path, settings):
    handler = RecordingHandler(
        lambda request: httpx.Response(
            400, text=json.dumps({"error": {"message": "bad size"}})
        )
    )
    server = create_server(settings, api_client=make_client(settings, handler))
    out = tmp_path / "fox.png"

    text = _call(server, "generate_image", {"prompt": "p", "output_path": str(out)})

    assert text == 'An error occurred: {"error": {"message": "bad size"}}'
    assert not out.exists()


def _run_lifespan(api_client, owns_client):
    async def run():
        async with client_lifespan(api_client, owns_client)(None):
            assert not api_client.http_client.is_closed

    asyncio.run(run())


def test_lifespan_leaves_injected_client_open(api_client):
    _run_lifespan(api_client, owns_client=False)
    assert not api_client.http_client.is_closed


def test_lifespan_closes_its_own_client(api_client):
    _run_lifespan(api_client, owns_client=True)
    assert api_client.http_client.is_closed
