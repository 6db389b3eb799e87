import team_card_generator.config


config = team_card_generator.config


#============================================
def test_overlay_config_from_environment(monkeypatch) -> None:
	monkeypatch.setenv("GOOGLE_MAPS_API_KEY", "abc")
	monkeypatch.setenv("MAP_FETCH_TIMEOUT", "2.5")
	overlay_config = config.load_overlay_config()
	assert overlay_config.api_key == "abc"
	assert overlay_config.timeout == 2.5
	assert overlay_config.enabled


#============================================
def test_malformed_timeout_falls_back(monkeypatch) -> None:
	"""
	A bad timeout value is ignored instead of failing the run.
	"""
	monkeypatch.setenv("MAP_FETCH_TIMEOUT", "five")
	assert config.load_overlay_config().timeout == config.MAP_FETCH_TIMEOUT
	monkeypatch.setenv("MAP_FETCH_TIMEOUT", "-1")
	assert config.load_overlay_config().timeout == config.MAP_FETCH_TIMEOUT
	monkeypatch.delenv("MAP_FETCH_TIMEOUT")
	assert config.load_overlay_config(enabled=False).timeout == config.MAP_FETCH_TIMEOUT


#============================================
def test_default_template_path(monkeypatch) -> None:
	monkeypatch.delenv("TEAM_CARD_TEMPLATE", raising=False)
	assert config.default_template_path() == config.DEFAULT_TEMPLATE_PATH
	monkeypatch.setenv("TEAM_CARD_TEMPLATE", "/tmp/custom.svg")
	assert config.default_template_path() == "/tmp/custom.svg"
