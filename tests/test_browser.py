"""
Unit tests for BrowserSession with a mocked WebDriver
"""
import base64
import itertools
import pytest
from unittest.mock import Mock, patch

from selenium.common.exceptions import WebDriverException

from src.browser import BrowserSession, RESOURCE_COUNT_SCRIPT
from src.errors import ExportError


def scripted_driver(resource_counts, ready_state='complete'):
    """Mock driver answering readyState and resource count scripts"""
    counts = iter(resource_counts)
    driver = Mock()

    def execute_script(script, *args):
        if 'readyState' in script:
            return ready_state
        if script == RESOURCE_COUNT_SCRIPT:
            return next(counts)
        return None

    driver.execute_script.side_effect = execute_script
    return driver


class TestBrowserSession:
    """Test WebDriver lifecycle and printing"""

    @pytest.fixture
    def session(self, sample_config):
        return BrowserSession(sample_config)

    def test_context_manager_starts_and_stops(self, session):
        driver = Mock()

        with patch.object(session, '_create_chrome_driver', return_value=driver):
            with session as active:
                assert active.driver is driver

        driver.quit.assert_called_once()
        assert session.driver is None

    def test_driver_closed_when_body_raises(self, session):
        driver = Mock()

        with patch.object(session, '_create_chrome_driver', return_value=driver):
            with pytest.raises(ValueError):
                with session:
                    raise ValueError('boom')

        driver.quit.assert_called_once()

    def test_start_failure_raises_export_error(self, session):
        with patch.object(session, '_create_chrome_driver', side_effect=WebDriverException('no chrome')):
            with pytest.raises(ExportError, match='Failed to start Chrome WebDriver'):
                session.start()

        assert session.driver is None

    def test_start_is_idempotent(self, session):
        with patch.object(session, '_create_chrome_driver', return_value=Mock()) as create:
            first = session.start()
            second = session.start()

        assert first is second
        create.assert_called_once()

    def test_stop_tolerates_quit_errors(self, session):
        session.driver = Mock()
        session.driver.quit.side_effect = WebDriverException('already gone')

        session.stop()

        assert session.driver is None

    def test_print_to_pdf_decodes_data(self, session):
        session.driver = Mock()
        session.driver.execute_cdp_cmd.return_value = {'data': base64.b64encode(b'%PDF-1.4 test').decode()}
        options = {'paperWidth': 8.3}

        assert session.print_to_pdf(options) == b'%PDF-1.4 test'
        session.driver.execute_cdp_cmd.assert_called_once_with('Page.printToPDF', options)

    def test_load_waits_for_quiet_network(self, session):
        session.driver = scripted_driver([3, 5, 5])

        with patch('src.browser.time.sleep') as sleep:
            session.load('http://localhost:3000/')

        session.driver.get.assert_called_once_with('http://localhost:3000/')
        assert sleep.call_count == 2

    def test_network_idle_times_out(self, session):
        session.driver = scripted_driver(itertools.count())

        with patch('src.browser.time.sleep'):
            assert session._wait_for_network_idle(0.05) is False

    def test_page_ready_timeout(self, session):
        session.driver = scripted_driver([], ready_state='loading')

        assert session.wait_for_page_ready() is False

    def test_network_observation_failure(self, session):
        session.driver = Mock()
        session.driver.execute_script.side_effect = WebDriverException('detached')

        assert session._wait_for_network_idle(1) is False


class TestChromeDriverCreation:
    """Test Chrome options built from configuration"""

    def test_headless_options_and_viewport(self, sample_config):
        sample_config['browser']['user_agent'] = 'docexport-test'

        with patch('src.browser.ChromeDriverManager') as manager, \
             patch('src.browser.ChromeService') as service, \
             patch('src.browser.webdriver.Chrome') as chrome:
            manager.return_value.install.return_value = '/usr/bin/chromedriver'
            driver = BrowserSession(sample_config)._create_chrome_driver()

        service.assert_called_once_with('/usr/bin/chromedriver')
        options = chrome.call_args.kwargs['options']
        assert '--headless=new' in options.arguments
        assert '--window-size=1260,400' in options.arguments
        assert '--user-agent=docexport-test' in options.arguments
        driver.set_page_load_timeout.assert_called_once_with(0.1)

    def test_headed_browser(self, sample_config):
        sample_config['browser']['headless'] = False
        sample_config['browser']['chrome_binary_path'] = '/opt/chrome/chrome'

        with patch('src.browser.ChromeDriverManager'), \
             patch('src.browser.ChromeService'), \
             patch('src.browser.webdriver.Chrome') as chrome:
            BrowserSession(sample_config)._create_chrome_driver()

        options = chrome.call_args.kwargs['options']
        assert '--headless=new' not in options.arguments
        assert options.binary_location == '/opt/chrome/chrome'
