"""
YDS (Yabancı Dil Sınavı) exam profile. User-facing texts are in Turkish.
"""

from englishtutor.domain.model import EvaluationKind, ScoringScale
from .profiles import ANY_DIFFICULTY, ExamProfile, OverallRule, SkillProfile

YDS_SCALE = ScoringScale(min_score=0, max_score=100, increment=1, passing_score=60)

SKILL_WEIGHTS = {
    "reading": 0.40,
    "listening": 0.20,
    "grammar": 0.25,
    "vocabulary": 0.15,
}


def _passage(title: str, text: str, sub_questions: list) -> dict:
    return {
        "kind": "multiple_choice",
        "title": f"YDS Okuma - {title}",
        "content": text,
        "instructions": "Metnin ana fikrini ve detaylarını belirleyin.",
        "time_limit": 1350,
        "points": 5,
        "body": {
            "kind": "reading",
            "passage": text,
            "passage_type": "academic_article",
            "topic": title,
            "sub_questions": sub_questions,
        },
        "metadata": {"passage_type": "academic_article"},
    }


READING_POOL = {
    "easy": [
        _passage(
            "Understanding Climate Change",
            "Climate change is one of the most pressing issues of our time. Scientists around the world have "
            "been studying this phenomenon for decades. The evidence shows that human activities, particularly "
            "the burning of fossil fuels, are the primary cause of recent climate change. This has led to rising "
            "global temperatures, melting ice caps, and changing weather patterns.",
            [
                {
                    "id": "1",
                    "prompt": "Bu metne göre, ana fikir nedir?",
                    "options": ["A) Human activity drives recent climate change",
                                "B) Scientists disagree about climate change",
                                "C) Ice caps are growing", "D) Weather patterns never change"],
                    "correct_answer": "A",
                    "explanation": "Metin, iklim değişikliğinin başlıca nedeninin insan faaliyetleri olduğunu söylüyor.",
                },
                {
                    "id": "2",
                    "prompt": "Metinde hangi sonuçtan bahsedilmemektedir?",
                    "options": ["A) Rising temperatures", "B) Melting ice caps",
                                "C) Changing weather patterns", "D) Falling sea levels"],
                    "correct_answer": "D",
                    "explanation": "Deniz seviyesinin düşmesinden bahsedilmiyor.",
                },
            ],
        )
    ],
    "medium": [
        _passage(
            "The Evolution of Artificial Intelligence",
            "The concept of artificial intelligence has evolved significantly since its inception in the 1950s. "
            "Initially, researchers focused on creating machines that could perform specific tasks that required "
            "human intelligence. However, modern AI systems utilize machine learning algorithms that can adapt "
            "and improve their performance over time. These systems have found applications in various fields, "
            "from healthcare to autonomous vehicles, revolutionizing how we approach complex problems.",
            [
                {
                    "id": "1",
                    "prompt": "Metne göre, modern yapay zekâ sistemlerini öncekilerden ayıran nedir?",
                    "options": ["A) They are only used in healthcare",
                                "B) They adapt and improve over time",
                                "C) They were invented in the 1990s", "D) They cannot solve complex problems"],
                    "correct_answer": "B",
                    "explanation": "Modern sistemler makine öğrenmesi ile zamanla gelişebiliyor.",
                },
                {
                    "id": "2",
                    "prompt": "Araştırmacılar başlangıçta neye odaklanmıştır?",
                    "options": ["A) Autonomous vehicles", "B) Specific tasks requiring human intelligence",
                                "C) Machine learning algorithms", "D) Medical diagnosis"],
                    "correct_answer": "B",
                    "explanation": "Metin, ilk çalışmaların belirli görevlere odaklandığını belirtiyor.",
                },
            ],
        )
    ],
    "hard": [
        _passage(
            "Quantum Mechanics and Modern Physics",
            "Quantum mechanics represents one of the most profound paradigm shifts in our understanding of the "
            "physical universe. Unlike classical physics, which describes a deterministic world where the "
            "position and momentum of particles can be precisely determined, quantum mechanics introduces "
            "fundamental uncertainty at the microscopic level. The wave-particle duality of matter and energy, "
            "along with phenomena such as quantum entanglement and superposition, challenges our intuitive "
            "understanding of reality and has led to revolutionary applications in computing and cryptography.",
            [
                {
                    "id": "1",
                    "prompt": "Metne göre, klasik fizik dünyayı nasıl tanımlar?",
                    "options": ["A) As fundamentally uncertain", "B) As deterministic",
                                "C) As entangled", "D) As a superposition"],
                    "correct_answer": "B",
                    "explanation": "Klasik fizik deterministik bir dünya tanımlar.",
                },
                {
                    "id": "2",
                    "prompt": "Hangi uygulama alanından bahsedilmektedir?",
                    "options": ["A) Agriculture", "B) Architecture", "C) Cryptography", "D) Linguistics"],
                    "correct_answer": "C",
                    "explanation": "Metin bilgisayar ve kriptografi uygulamalarından söz ediyor.",
                },
            ],
        )
    ],
}


def _single(title: str, question: str, options: list, answer: str, explanation: str,
            instructions: str, time_limit: int, **metadata) -> dict:
    return {
        "kind": "multiple_choice",
        "title": title,
        "content": question,
        "instructions": instructions,
        "options": options,
        "correct_answer": answer,
        "time_limit": time_limit,
        "points": 1,
        "metadata": dict(metadata, explanation=explanation),
    }


VOCABULARY_POOL = {
    "easy": [
        _single("YDS Kelime - SYNONYM", "Choose the word closest in meaning to 'happy':",
                ["A) Sad", "B) Joyful", "C) Angry", "D) Tired"], "B",
                "'Joyful' means happy or cheerful.", "En yakın anlamlı kelimeyi seçin.", 120,
                question_type="synonym", vocabulary_level="basic"),
        _single("YDS Kelime - ANTONYM", "Choose the word opposite in meaning to 'hot':",
                ["A) Warm", "B) Cold", "C) Cool", "D) Mild"], "B",
                "'Cold' is the opposite of 'hot'.", "Zıt anlamlı kelimeyi seçin.", 120,
                question_type="antonym", vocabulary_level="basic"),
    ],
    "medium": [
        _single("YDS Kelime - SYNONYM", "Choose the word closest in meaning to 'elaborate':",
                ["A) Simple", "B) Detailed", "C) Quick", "D) Small"], "B",
                "'Elaborate' means detailed or complex.", "En yakın anlamlı kelimeyi seçin.", 120,
                question_type="synonym", vocabulary_level="intermediate"),
    ],
    "hard": [
        _single("YDS Kelime - SYNONYM", "Choose the word closest in meaning to 'ubiquitous':",
                ["A) Rare", "B) Everywhere", "C) Hidden", "D) Ancient"], "B",
                "'Ubiquitous' means present everywhere.", "En yakın anlamlı kelimeyi seçin.", 120,
                question_type="synonym", vocabulary_level="advanced"),
    ],
}

GRAMMAR_POOL = {
    ANY_DIFFICULTY: [
        _single("YDS Gramer - TENSES", "I _____ to school every day.",
                ["A) go", "B) goes", "C) going", "D) gone"], "A",
                "Simple present tense with 'I' requires base form of verb.", "Cümleyi tamamlayın.", 108,
                question_type="sentence_completion", grammar_area="tenses"),
        _single("YDS Gramer - SUBJECT VERB AGREEMENT", "Find the error: 'She don't like coffee.'",
                ["A) She", "B) don't", "C) like", "D) coffee"], "B",
                "Should be 'doesn't' with third person singular.", "Hatayı bulun.", 108,
                question_type="error_identification", grammar_area="subject_verb_agreement"),
    ]
}


def _listening(content_type: str, script: str, sub_questions: list) -> dict:
    return {
        "kind": "multiple_choice",
        "title": f"YDS Dinleme - {content_type.upper()}",
        "content": "Kaydı dinleyin ve soruları yanıtlayın.",
        "instructions": "Dinlediğiniz metnin ana fikrini ve detaylarını belirleyin.",
        "time_limit": 180,
        "points": 2,
        "body": {
            "kind": "listening",
            "audio_script": script,
            "audio_ref": f"/audio/yds_{content_type}_sample.mp3",
            "context": content_type,
            "sub_questions": sub_questions,
        },
        "metadata": {"content_type": content_type},
    }


LISTENING_POOL = {
    ANY_DIFFICULTY: [
        _listening(
            "conversation",
            "Woman: Have you finished the report for Monday's meeting? Man: Almost. I still need the sales "
            "figures from the last quarter. Woman: I can email them to you this afternoon. Man: That would be "
            "great, then I can send the final version tomorrow morning.",
            [
                {"id": "1", "prompt": "Konuşmanın ana konusu nedir?",
                 "options": ["A) Preparing a report", "B) Planning a holiday",
                             "C) Hiring a new employee", "D) Cancelling a meeting"],
                 "correct_answer": "A"},
                {"id": "2", "prompt": "Kadın öğleden sonra ne yapacak?",
                 "options": ["A) Attend a meeting", "B) Email the sales figures",
                             "C) Write the final version", "D) Call the manager"],
                 "correct_answer": "B"},
            ],
        ),
        _listening(
            "lecture",
            "Today we will look at how sleep affects memory. Research shows that during deep sleep the brain "
            "replays information learned during the day and transfers it to long-term memory. Students who sleep "
            "well after studying remember significantly more than those who stay up all night.",
            [
                {"id": "1", "prompt": "Dersin ana fikri nedir?",
                 "options": ["A) Sleep helps consolidate memory", "B) Studying at night is best",
                             "C) Dreams predict the future", "D) Memory declines with age"],
                 "correct_answer": "A"},
                {"id": "2", "prompt": "Konuşmacıya göre bilgi uzun süreli belleğe ne zaman aktarılır?",
                 "options": ["A) While studying", "B) During deep sleep",
                             "C) During exams", "D) In the morning"],
                 "correct_answer": "B"},
            ],
        ),
    ]
}


def _multi_part_feedback(skill_word: str, excellent_tail: str) -> tuple:
    return (
        f"{skill_word.capitalize()} becerinizi geliştirmeniz gerekiyor. {{correct}}/{{total}} soruyu doğru "
        f"yanıtladınız (%{{percentage:.1f}}). Daha fazla pratik yapın.",
        f"İyi {skill_word} performansı. {{correct}}/{{total}} soruyu doğru yanıtladınız (%{{percentage:.1f}}). "
        f"Detay sorularında daha dikkatli olun.",
        f"Mükemmel {skill_word} performansı! {{correct}}/{{total}} soruyu doğru yanıtladınız "
        f"(%{{percentage:.1f}}). {excellent_tail}",
    )


YDS_PROFILE = ExamProfile(
    code="yds",
    name="YDS",
    description="Yabancı Dil Bilgisi Seviye Tespit Sınavı",
    scale=YDS_SCALE,
    overall_rule=OverallRule.WEIGHTED,
    skill_weights=SKILL_WEIGHTS,
    descriptors=(
        (85, "Çok İyi"),
        (70, "İyi"),
        (60, "Geçer"),
        (50, "Zayıf"),
        (0, "Başarısız"),
    ),
    correct_feedback="Doğru! Tebrikler.",
    incorrect_feedback="Yanlış. Doğru cevap: {answer}",
    correct_suggestion="Böyle devam edin!",
    short_answer_warning="Kelime sayısı: {count}/{minimum}. Görevi tam karşılamak için daha fazla yazın.",
    trend_delta=2.0,
    skills=[
        SkillProfile(
            code="reading",
            name="Okuma",
            max_score=100,
            evaluation_kind=EvaluationKind.OBJECTIVE,
            time_limit=5400,
            feedback=_multi_part_feedback("okuma", "Akademik metinleri çok iyi anlıyorsunuz."),
            suggestions=(
                "Temel okuma stratejilerine odaklanın: hızlı okuma, tarama ve paragraf yapısını anlama. Kısa "
                "akademik metinlerle başlayın.",
                "İyi bir temel var. Ana fikir ve detay sorularını ayırt etme konusunda çalışın. Kelime "
                "dağarcığınızı geliştirin.",
                "Harika! Akademik metinler okumaya devam edin ve zaman yönetimi stratejilerinizi geliştirin.",
            ),
            incorrect_suggestion="Metni daha dikkatli okuyun. Ana fikri ve detayları ayırt etmeye çalışın.",
            weak_areas=("Ana fikir bulma", "Detay soruları", "Çıkarım yapma"),
            content_pool=READING_POOL,
        ),
        SkillProfile(
            code="listening",
            name="Dinleme",
            max_score=100,
            evaluation_kind=EvaluationKind.OBJECTIVE,
            time_limit=1800,
            feedback=_multi_part_feedback("dinleme", "Akademik dinleme metinlerini çok iyi anlıyorsunuz."),
            suggestions=(
                "Temel dinleme becerilerine odaklanın: ana fikirleri belirleme, konuşmacı amacını anlama. "
                "Başlangıçta altyazılı içerikler kullanın.",
                "İyi bir temel var. Not alma tekniklerini geliştirin ve anahtar kelimelere odaklanın.",
                "Harika dinleme becerisi! Akademik konuşmalar ve dersler dinlemeye devam edin.",
            ),
            incorrect_suggestion="Dinleme becerilerinizi geliştirin. Anahtar kelimelere odaklanın ve not alın.",
            weak_areas=("Ana fikir belirleme", "Detay yakalama", "Konuşmacı tutumu"),
            content_pool=LISTENING_POOL,
        ),
        SkillProfile(
            code="grammar",
            name="Dilbilgisi",
            max_score=100,
            evaluation_kind=EvaluationKind.OBJECTIVE,
            time_limit=2700,
            feedback=_multi_part_feedback("dilbilgisi", "Gramer bilginiz çok iyi."),
            suggestions=(
                "Gramer kurallarını tekrar gözden geçirin.",
                "Gramer bilginiz iyi! Daha karmaşık yapılarla pratik yapmaya devam edin.",
                "Gramer bilginiz iyi! Daha karmaşık yapılarla pratik yapmaya devam edin.",
            ),
            incorrect_suggestion="Gramer kurallarını tekrar gözden geçirin. Cümle yapılarına ve zaman uyumuna "
                                 "dikkat edin.",
            weak_areas=("Zaman uyumu", "Cümle yapısı", "Modal fiiller"),
            content_pool=GRAMMAR_POOL,
        ),
        SkillProfile(
            code="vocabulary",
            name="Kelime Bilgisi",
            max_score=100,
            evaluation_kind=EvaluationKind.OBJECTIVE,
            time_limit=1800,
            feedback=_multi_part_feedback("kelime", "Kelime bilginiz çok iyi."),
            suggestions=(
                "Kelime kartları kullanarak düzenli tekrar yapın.",
                "Kelime bilginiz iyi! Daha zor seviyedeki kelimelerle pratik yapmaya devam edin.",
                "Kelime bilginiz iyi! Daha zor seviyedeki kelimelerle pratik yapmaya devam edin.",
            ),
            incorrect_suggestion="Kelime dağarcığınızı geliştirin. Kelimelerin farklı anlamlarını ve kullanım "
                                 "alanlarını öğrenin.",
            weak_areas=("Eş anlamlı kelimeler", "Zıt anlamlı kelimeler", "Kelime türetme"),
            content_pool=VOCABULARY_POOL,
        ),
    ],
)
