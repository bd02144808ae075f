from storefront.config import StorefrontConfig


def test_from_env_reads_storefront_variables():
    config = StorefrontConfig.from_env(
        {
            "STOREFRONT_API_URL": "https://shop.example.com/",
            "STOREFRONT_TIMEOUT": "3.5",
            "STOREFRONT_CHECKOUT_CLEANUP_DELAY": "1",
        }
    )
    assert config.api_url == "https://shop.example.com"
    assert config.timeout == 3.5
    assert config.checkout_cleanup_delay == 1.0
    assert config.storage_path is None


def test_from_env_defaults():
    config = StorefrontConfig.from_env({})
    assert config.api_url == "http://localhost:8000"
    assert config.timeout == 10.0
    assert config.checkout_cleanup_delay == 5.0
