from faker import Faker


class ChallengeGenerator:
    """Produces the text players race to type."""

    def __init__(self, word_count: int = 12, locale: str = 'en_US', seed=None):
        self.word_count = word_count
        self._faker = Faker(locale)
        if seed is not None:
            self._faker.seed_instance(seed)

    def __call__(self) -> str:
        return ' '.join(self._faker.words(nb=self.word_count))
