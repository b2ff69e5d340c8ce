"""Lua script loader for Kvrocks operations"""

from pathlib import Path


def load_lua_script(*, script_name: str) -> str:
    """
    Load a Lua script from the lua_script directory

    Raises:
        FileNotFoundError: If the script file doesn't exist
    """
    script_path = Path(__file__).parent / f'{script_name}.lua'

    if not script_path.exists():
        raise FileNotFoundError(f'Lua script not found: {script_path}')

    return script_path.read_text(encoding='utf-8')


TOKEN_BUCKET_SCRIPT = load_lua_script(script_name='token_bucket')
