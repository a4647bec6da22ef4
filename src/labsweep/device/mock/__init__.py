from .mock_spectrum_analyzer import MockSpectrumAnalyzer

__all__ = ["MockSpectrumAnalyzer"]
