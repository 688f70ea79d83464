"""Demo endpoints loaded into a fresh registry."""
from echo.schemas import Attributes, Endpoint, Response

SEED_ENDPOINTS = [
    Endpoint(
        type="endpoints",
        attributes=Attributes(
            verb="GET",
            path="/revert_entropy",
            response=Response(
                code=200,
                headers={"Content-Type": "application/json"},
                body='"{ "message": "INSUFFICIENT DATA FOR MEANINGFUL ANSWER" }"',
            ),
        ),
    ),
    Endpoint(
        type="endpoints",
        attributes=Attributes(
            verb="POST",
            path="/post_it",
            response=Response(
                code=201,
                headers={"Accept": "test/plain", "x-api-key": "superdupersecret"},
                body="Your secrets are not so safe",
            ),
        ),
    ),
    Endpoint(
        type="endpoints",
        attributes=Attributes(
            verb="PUT",
            path="/fail",
            response=Response(
                code=400,
                headers={"Accept": "test/plain", "Content-Type": "application/json"},
                body='"{"error": "something went horribly wrong :(" }"',
            ),
        ),
    ),
    Endpoint(
        type="endpoints",
        attributes=Attributes(
            verb="DELETE",
            path="/fake_delete",
            response=Response(code=204, headers={}, body=""),
        ),
    ),
]
