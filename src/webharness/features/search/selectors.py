from ...data_models import Locator

# Locators used by the search page
SEARCH_BOX = Locator.by_name("q", name="search box")
SEARCH_BOX_XPATH = Locator.by_xpath("//input[@name='q'] | //textarea[@name='q']", name="search box (xpath)")
SEARCH_RESULTS = Locator.by_id("search", name="search results")
